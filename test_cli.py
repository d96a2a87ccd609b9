import pytest
from sqlalchemy import inspect, text
from ledshop import create_app, db
from ledshop.auth.models import User
from ledshop.migration import run_auto_migration
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
def runner(app):
    return app.test_cli_runner()


def test_create_user_and_grant_admin(runner, app):
    result = runner.invoke(args=['create-user', '--email', 'Owner@Example.com',
                                 '--password', 'secret123', '--company', 'EFX'])
    assert result.exit_code == 0
    assert 'created successfully' in result.output

    result = runner.invoke(args=['create-user', '--email', 'owner@example.com',
                                 '--password', 'secret123'])
    assert 'already exists' in result.output

    result = runner.invoke(args=['grant-admin', 'owner@example.com', 'ghost@example.com'])
    assert 'owner@example.com is now an admin' in result.output
    assert 'No user with email "ghost@example.com"' in result.output

    with app.app_context():
        user = User.query.filter_by(email='owner@example.com').one()
        assert user.company_name == 'EFX'
        assert (user.is_admin, user.can_view_prices, user.can_order_products) == (True, True, True)
        assert UserPoints.query.filter_by(user_id=user.id).count() == 1

    result = runner.invoke(args=['list-users'])
    assert 'owner@example.com' in result.output


def test_add_points(runner, app):
    runner.invoke(args=['create-user', '--email', 'fan@example.com', '--password', 'secret123'])
    result = runner.invoke(args=['add-points', 'fan@example.com', '150',
                                 '--description', 'Launch promo'])
    assert result.exit_code == 0
    assert 'balance 150' in result.output

    with app.app_context():
        user = User.query.filter_by(email='fan@example.com').one()
        assert UserPoints.query.filter_by(user_id=user.id).one().total_accumulated == 150

    result = runner.invoke(args=['add-points', 'nobody@example.com', '5'])
    assert 'No user with email' in result.output

    result = runner.invoke(args=['add-points', 'fan@example.com', '0'])
    assert result.exit_code == 0
    assert 'must not be zero' in result.output

    result = runner.invoke(args=['add-points', 'fan@example.com', '--', '-500'])
    assert result.exit_code == 0
    assert 'Insufficient points' in result.output

    with app.app_context():
        user = User.query.filter_by(email='fan@example.com').one()
        assert UserPoints.query.filter_by(user_id=user.id).one().current_balance == 150


def test_init_and_patch_db(runner):
    assert 'Database tables created' in runner.invoke(args=['init-db']).output
    result = runner.invoke(args=['patch-db'])
    assert result.exit_code == 0
    assert 'Schema patch complete' in result.output


def test_migration_adds_missing_columns(app):
    with app.app_context():
        db.drop_all()
        with db.engine.begin() as conn:
            conn.execute(text(
                'CREATE TABLE orders ('
                'id INTEGER PRIMARY KEY, user_id INTEGER NOT NULL, '
                'status VARCHAR(20) NOT NULL, total_amount NUMERIC(10, 2) NOT NULL, '
                'created_at TIMESTAMP NOT NULL)'
            ))

    applied = run_auto_migration(app)
    assert sorted(applied) == sorted([
        'Added orders.square_order_id',
        'Added orders.custom_order_data',
        'Added orders.external_state',
        'Added orders.admin_notes',
        'Added orders.updated_at',
    ])

    with app.app_context():
        columns = {c['name'] for c in inspect(db.engine).get_columns('orders')}
        assert {'custom_order_data', 'external_state', 'admin_notes'} <= columns
        assert 'user_points' in inspect(db.engine).get_table_names()

    # a second run has nothing left to do
    assert run_auto_migration(app) == []
