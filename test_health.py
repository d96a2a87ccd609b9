import pytest
from sqlalchemy.exc import OperationalError
from ledshop import create_app, db


@pytest.fixture
def app(tmp_path):
    app = create_app(config_name='testing')
    app.config['UPLOAD_DIR'] = str(tmp_path)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def test_index_lists_endpoints(client):
    resp = client.get('/')
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['status'] == 'running'
    assert data['endpoints']['orders'] == '/api/orders'


def test_health_ok(client):
    resp = client.get('/api/health')
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['status'] == 'ok'
    assert data['details'] == {'db': 'ok'}
    assert data['environment'] == 'testing'


def test_health_reports_database_failure(client, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError('SELECT 1', {}, Exception('connection refused'))

    monkeypatch.setattr(db.session, 'execute', broken)
    resp = client.get('/api/health')
    assert resp.status_code == 500
    assert resp.get_json()['details'] == {'db': 'error'}


def test_uploads_are_served(client, tmp_path):
    (tmp_path / 'photos').mkdir()
    (tmp_path / 'photos' / 'a.jpg').write_bytes(b'jpeg')
    resp = client.get('/uploads/photos/a.jpg')
    assert resp.status_code == 200
    assert resp.data == b'jpeg'
    assert client.get('/uploads/photos/missing.jpg').status_code == 404


def test_unknown_route_is_json(client):
    resp = client.get('/api/nothing-here')
    assert resp.status_code == 404
    assert 'error' in resp.get_json()
