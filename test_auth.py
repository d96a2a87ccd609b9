import pytest
from ledshop import create_app, db
from ledshop.auth.models import User
from ledshop.auth.tokens import generate_token
from ledshop.points.models import UserPoints


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


def _register(client, email='jane@example.com', password='secret123', **extra):
    body = {'email': email, 'password': password}
    body.update(extra)
    return client.post('/api/auth/register', json=body)


def test_register_creates_user_and_points_row(client, app):
    resp = _register(client, company_name='Bright Signs')
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['token']
    assert data['user']['email'] == 'jane@example.com'
    assert data['user']['company_name'] == 'Bright Signs'
    assert 'password_hash' not in data['user']

    with app.app_context():
        user = User.query.filter_by(email='jane@example.com').first()
        assert user.password_hash != 'secret123'
        assert user.is_admin is False
        assert user.can_view_prices is False
        assert user.can_order_products is False
        assert UserPoints.query.filter_by(user_id=user.id).count() == 1


def test_register_normalises_email(client):
    resp = _register(client, email='  Jane@Example.COM ')
    assert resp.status_code == 201
    assert resp.get_json()['user']['email'] == 'jane@example.com'

    resp = client.post('/api/auth/login', json={'email': 'JANE@example.com', 'password': 'secret123'})
    assert resp.status_code == 200


def test_register_duplicate_email(client):
    assert _register(client).status_code == 201
    resp = _register(client)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Email already registered'


def test_register_validation(client):
    resp = client.post('/api/auth/register', json={'email': 'not-an-email', 'password': 'short'})
    assert resp.status_code == 400
    details = resp.get_json()['details']
    assert 'email' in details
    assert 'password' in details


@pytest.mark.parametrize('path', ['/api/auth/register', '/api/auth/login'])
def test_auth_routes_reject_non_object_bodies(client, path):
    resp = client.post(path, json=[{'email': 'jane@example.com', 'password': 'secret123'}])
    assert resp.status_code == 400
    assert resp.get_json()['details'] == {'body': 'Expected object.'}


def test_login(client):
    _register(client)
    resp = client.post('/api/auth/login', json={'email': 'jane@example.com', 'password': 'secret123'})
    assert resp.status_code == 200
    assert resp.get_json()['token']

    resp = client.post('/api/auth/login', json={'email': 'jane@example.com', 'password': 'wrong-pass'})
    assert resp.status_code == 401

    resp = client.post('/api/auth/login', json={'email': 'nobody@example.com', 'password': 'secret123'})
    assert resp.status_code == 401


def test_protected_routes_require_token(client):
    assert client.get('/api/user/me').status_code == 401
    resp = client.get('/api/user/me', headers={'Authorization': 'Bearer not-a-jwt'})
    assert resp.status_code == 401
    resp = client.get('/api/user/me', headers={'Authorization': 'Basic abc'})
    assert resp.status_code == 401


def test_token_for_deleted_user_is_rejected(client, app):
    with app.test_request_context():
        token = generate_token(999)
    resp = client.get('/api/user/me', headers={'Authorization': f'Bearer {token}'})
    assert resp.status_code == 401


def test_profile(client):
    token = _register(client, name='Jane').get_json()['token']
    resp = client.get('/api/user/me', headers={'Authorization': f'Bearer {token}'})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['name'] == 'Jane'
    assert data['is_admin'] is False
    assert data['points'] == {'current': 0, 'total': 0}

    resp = client.get('/api/user', headers={'Authorization': f'Bearer {token}'})
    assert resp.status_code == 200

    resp = client.get('/api/user/orders', headers={'Authorization': f'Bearer {token}'})
    assert resp.status_code == 200
    assert resp.get_json() == []
