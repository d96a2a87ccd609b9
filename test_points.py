import pytest
from datetime import datetime, timedelta
from ledshop import create_app, db
from ledshop.auth.service import create_user
from ledshop.auth.tokens import generate_token
from ledshop.points import service
from ledshop.points.models import UserPoints, PointsTransaction


@pytest.fixture
def app():
    app = create_app(config_name='testing')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def _auth(app, email, company_name=None):
    with app.app_context():
        user = create_user(email=email, password='secret123', company_name=company_name)
        db.session.commit()
        return user.id, {'Authorization': f'Bearer {generate_token(user.id)}'}


def test_daily_visit_awarded_once_per_day(client, app):
    user_id, headers = _auth(app, 'visitor@example.com')

    resp = client.post('/api/points/visit', headers=headers)
    assert resp.get_json() == {'awarded': True, 'points': 1}
    resp = client.post('/api/points/visit', headers=headers)
    assert resp.get_json() == {'awarded': False, 'points': 0}

    resp = client.get('/api/points', headers=headers)
    assert resp.get_json() == {'current': 1, 'total': 1}
    assert client.get('/api/points/balance', headers=headers).get_json() == {'current': 1, 'total': 1}


def test_visit_after_interval(app):
    user_id, _ = _auth(app, 'visitor@example.com')
    start = datetime(2024, 3, 1, 9, 0)
    with app.app_context():
        assert service.award_visit_points(user_id, now=start)['awarded'] is True
        assert service.award_visit_points(user_id, now=start + timedelta(hours=23))['awarded'] is False
        assert service.award_visit_points(user_id, now=start + timedelta(hours=24, minutes=1))['awarded'] is True
        assert service.get_user_points(user_id) == {'current': 2, 'total': 2}


def test_purchase_points_round_down():
    assert service.purchase_points_for('0') == 0
    assert service.purchase_points_for('9.99') == 0
    assert service.purchase_points_for('10.00') == 1
    assert service.purchase_points_for('125.50') == 12
    assert service.purchase_points_for(-40) == 0


def test_transactions_newest_first(client, app):
    user_id, headers = _auth(app, 'ledger@example.com')
    with app.app_context():
        service.award_purchase_points(user_id, order_id=7, total_amount='250.00')
        service.award_photo_points(user_id, photo_id=3)
        db.session.commit()

    resp = client.get('/api/points/transactions', headers=headers)
    rows = resp.get_json()
    assert [r['reference_type'] for r in rows] == ['photo', 'order']
    assert rows[1]['amount'] == 25
    assert rows[1]['description'] == 'Purchase points: $250.00'
    assert all(r['type'] == 'earned' for r in rows)

    resp = client.get('/api/points/transactions?limit=1', headers=headers)
    assert len(resp.get_json()) == 1


def test_balance_matches_ledger(app):
    user_id, _ = _auth(app, 'ledger@example.com')
    with app.app_context():
        service.adjust_points(user_id, 40, 'Welcome bonus')
        service.adjust_points(user_id, -15, 'Correction')
        db.session.commit()

        balance = UserPoints.query.filter_by(user_id=user_id).one()
        earned = sum(t.amount for t in PointsTransaction.query.filter_by(user_id=user_id, type='earned'))
        spent = sum(t.amount for t in PointsTransaction.query.filter_by(user_id=user_id, type='spent'))
        assert balance.current_balance == earned - spent == 25
        assert balance.total_accumulated == earned == 40


def test_adjust_points_refuses_overdraw_and_zero(app):
    user_id, _ = _auth(app, 'ledger@example.com')
    with app.app_context():
        with pytest.raises(service.InsufficientPoints):
            service.adjust_points(user_id, -5, 'Too much')
        with pytest.raises(ValueError):
            service.adjust_points(user_id, 0, 'Nothing')
        db.session.rollback()
        assert service.get_user_points(user_id) == {'current': 0, 'total': 0}


def test_leaderboard(client, app):
    first, _ = _auth(app, 'first@example.com', company_name='Neon Co')
    second, _ = _auth(app, 'second@example.com')
    _auth(app, 'zero@example.com')
    with app.app_context():
        service.adjust_points(first, 50, 'Bonus')
        service.adjust_points(second, 20, 'Bonus')
        # spending does not lower the ranking
        service.adjust_points(first, -45, 'Spent')
        db.session.commit()

    resp = client.get('/api/leaderboard')
    assert resp.status_code == 200
    rows = resp.get_json()
    assert [r['email'] for r in rows] == ['first@example.com', 'second@example.com']
    assert rows[0] == {'rank': 1, 'user_id': first, 'email': 'first@example.com',
                       'company_name': 'Neon Co', 'total_accumulated': 50}
    assert rows[1]['rank'] == 2

    assert len(client.get('/api/leaderboard?limit=1').get_json()) == 1
