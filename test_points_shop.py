import pytest
from ledshop import create_app, db
from ledshop.auth.service import create_user
from ledshop.auth.tokens import generate_token
from ledshop.points import service
from ledshop.points.models import PointsShopItem, PointsRedemption, PointsTransaction, UserPoints


@pytest.fixture
def app():
    app = create_app(config_name='testing')
    with app.app_context():
        db.create_all()
        db.session.add_all([
            PointsShopItem(id=1, name='Cap', point_cost=20, stock_quantity=2, active=True),
            PointsShopItem(id=2, name='Jacket', point_cost=200, stock_quantity=5, active=True),
            PointsShopItem(id=3, name='Old Mug', point_cost=5, stock_quantity=9, active=False),
            PointsShopItem(id=4, name='Sticker', point_cost=1, stock_quantity=0, active=True),
        ])
        db.session.commit()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def _auth(app, email, points=0):
    with app.app_context():
        user = create_user(email=email, password='secret123')
        if points:
            service.adjust_points(user.id, points, 'Starting balance')
        db.session.commit()
        return user.id, {'Authorization': f'Bearer {generate_token(user.id)}'}


def test_public_item_list(client):
    resp = client.get('/api/points-shop/items')
    assert resp.status_code == 200
    names = [i['name'] for i in resp.get_json()]
    assert names == ['Sticker', 'Cap', 'Jacket']


def test_redeem_rejects_non_object_body(client, app):
    _, headers = _auth(app, 'lists@example.com', points=50)
    resp = client.post('/api/points-shop/redeem', json=[1], headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['details'] == {'body': 'Expected object.'}

    with app.app_context():
        assert PointsRedemption.query.count() == 0


def test_redeem_item(client, app):
    user_id, headers = _auth(app, 'shopper@example.com', points=50)
    resp = client.post('/api/points-shop/redeem', json={'itemId': 1}, headers=headers)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['success'] is True
    assert data['remainingPoints'] == 30

    with app.app_context():
        assert db.session.get(PointsShopItem, 1).stock_quantity == 1
        balance = UserPoints.query.filter_by(user_id=user_id).one()
        assert balance.current_balance == 30
        assert balance.total_accumulated == 50
        redemption = db.session.get(PointsRedemption, data['redemptionId'])
        assert redemption.points_spent == 20
        assert redemption.status == 'pending'
        spent = PointsTransaction.query.filter_by(user_id=user_id, type='spent').one()
        assert spent.reference_type == 'redemption'
        assert spent.description == 'Redeemed: Cap'

    resp = client.get('/api/points-shop/redemptions', headers=headers)
    assert resp.get_json()[0]['item_name'] == 'Cap'


def test_redeem_refusals_change_nothing(client, app):
    user_id, headers = _auth(app, 'shopper@example.com', points=50)

    resp = client.post('/api/points-shop/redeem', json={'itemId': 2}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Insufficient points'

    resp = client.post('/api/points-shop/redeem', json={'itemId': 4}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Item out of stock'

    # inactive and unknown items are both "not found"
    assert client.post('/api/points-shop/redeem', json={'itemId': 3}, headers=headers).status_code == 404
    assert client.post('/api/points-shop/redeem', json={'itemId': 99}, headers=headers).status_code == 404
    assert client.post('/api/points-shop/redeem', json={'itemId': 'one'}, headers=headers).status_code == 400

    with app.app_context():
        assert UserPoints.query.filter_by(user_id=user_id).one().current_balance == 50
        assert db.session.get(PointsShopItem, 2).stock_quantity == 5
        assert PointsRedemption.query.count() == 0
        assert PointsTransaction.query.filter_by(type='spent').count() == 0


def test_redeem_until_sold_out(client, app):
    _, headers = _auth(app, 'shopper@example.com', points=100)
    for _ in range(2):
        assert client.post('/api/points-shop/redeem', json={'itemId': 1}, headers=headers).status_code == 200
    resp = client.post('/api/points-shop/redeem', json={'itemId': 1}, headers=headers)
    assert resp.status_code == 400
    with app.app_context():
        assert db.session.get(PointsShopItem, 1).stock_quantity == 0


def test_redeem_requires_login(client):
    assert client.post('/api/points-shop/redeem', json={'itemId': 1}).status_code == 401
