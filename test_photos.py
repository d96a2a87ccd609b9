import io
import pytest
from ledshop import create_app, db
from ledshop.auth.service import create_user
from ledshop.auth.tokens import generate_token
from ledshop.photos.models import Photo
from ledshop.points.models import UserPoints, PointsTransaction


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


@pytest.fixture
def user(app):
    with app.app_context():
        user = create_user(email='installer@example.com', password='secret123')
        db.session.commit()
        return user.id, {'Authorization': f'Bearer {generate_token(user.id)}'}


def _upload(client, headers, name='shopfront.jpg', mimetype='image/jpeg', **form):
    data = {'photo': (io.BytesIO(b'\xff\xd8\xff\xe0fake-jpeg'), name, mimetype)}
    data.update(form)
    return client.post('/api/photos/upload', headers=headers,
                       content_type='multipart/form-data', data=data)


def test_upload_awards_points(client, app, user, tmp_path):
    user_id, headers = user
    resp = _upload(client, headers, description='Bar install')
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['pointsAwarded'] == 5
    photo = data['photo']
    assert photo['description'] == 'Bar install'
    assert photo['file_key'].startswith('photos/')
    assert photo['file_key'].endswith('-shopfront.jpg')
    assert (tmp_path / photo['file_key']).exists()

    with app.app_context():
        assert UserPoints.query.filter_by(user_id=user_id).one().current_balance == 5
        txn = PointsTransaction.query.filter_by(user_id=user_id).one()
        assert txn.reference_type == 'photo'
        assert txn.reference_id == photo['id']

    # the stored file is served back from its url
    served = client.get(photo['file_url'].replace('http://localhost', ''))
    assert served.status_code == 200
    assert served.data == b'\xff\xd8\xff\xe0fake-jpeg'

    listed = client.get('/api/photos', headers=headers).get_json()
    assert [p['id'] for p in listed] == [photo['id']]


def test_upload_rejects_bad_requests(client, app, user):
    _, headers = user
    resp = client.post('/api/photos/upload', headers=headers,
                       content_type='multipart/form-data', data={})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'No file uploaded'

    resp = _upload(client, headers, name='notes.txt', mimetype='text/plain')
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Only image files are allowed'

    assert _upload(client, {}).status_code == 401
    with app.app_context():
        assert Photo.query.count() == 0


def test_failed_save_removes_file(client, app, user, tmp_path, monkeypatch):
    user_id, headers = user

    def broken(user_id, photo_id):
        raise RuntimeError('ledger unavailable')

    monkeypatch.setattr('ledshop.photos.routes.award_photo_points', broken)
    with pytest.raises(RuntimeError):
        _upload(client, headers)

    assert not list((tmp_path / 'photos').iterdir())
    with app.app_context():
        assert Photo.query.count() == 0
        assert UserPoints.query.filter_by(user_id=user_id).one().current_balance == 0


def test_unsupported_storage_provider(client, app, user):
    _, headers = user
    app.config['STORAGE_PROVIDER'] = 's3'
    resp = _upload(client, headers)
    assert resp.status_code == 500
    assert resp.get_json()['error'] == 'Failed to upload photo'
