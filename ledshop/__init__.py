import click
from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException
from config import config

db = SQLAlchemy()


def create_app(config_name='default'):
    """Application factory: creates and configures the Flask app."""
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # ── Logging ───────────────────────────────────────────────────
    from ledshop.utils.logging import setup_logging
    setup_logging(app)

    # ── Extensions ────────────────────────────────────────────────
    db.init_app(app)
    CORS(
        app,
        resources={r"/api/*": {"origins": _allowed_origins(app)}},
        supports_credentials=True,
    )

    # ── Blueprints ────────────────────────────────────────────────
    from ledshop.main import main as main_blueprint
    app.register_blueprint(main_blueprint)

    from ledshop.auth import auth as auth_blueprint
    app.register_blueprint(auth_blueprint, url_prefix='/api/auth')

    from ledshop.users import users as users_blueprint
    app.register_blueprint(users_blueprint, url_prefix='/api/user')

    from ledshop.orders import orders as orders_blueprint
    app.register_blueprint(orders_blueprint, url_prefix='/api/orders')

    from ledshop.catalog import catalog as catalog_blueprint
    app.register_blueprint(catalog_blueprint, url_prefix='/api/square')

    from ledshop.calculators import drivers as drivers_blueprint
    app.register_blueprint(drivers_blueprint, url_prefix='/api/drivers')

    from ledshop.photos import photos as photos_blueprint
    app.register_blueprint(photos_blueprint, url_prefix='/api/photos')

    from ledshop.points import points, points_shop, leaderboard
    app.register_blueprint(points, url_prefix='/api/points')
    app.register_blueprint(points_shop, url_prefix='/api/points-shop')
    app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    from ledshop.admin import admin as admin_blueprint
    app.register_blueprint(admin_blueprint, url_prefix='/api/admin')

    # Models without a blueprint of their own
    from ledshop.notifications import models  # noqa: F401

    # ── Error Handlers ────────────────────────────────────────────
    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(500)
    def internal_error(e):
        db.session.rollback()
        return jsonify({'error': 'Internal server error'}), 500

    # ── CLI Commands ──────────────────────────────────────────────
    register_commands(app)

    # ── ProxyFix (HTTPS termination at the platform edge) ──
    from werkzeug.middleware.proxy_fix import ProxyFix
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app


def _allowed_origins(app):
    """FRONTEND_URL is a comma-separated list; any origin is allowed when unset."""
    raw = app.config.get('FRONTEND_URL') or ''
    origins = [url.strip() for url in raw.split(',') if url.strip()]
    return origins or '*'


def register_commands(app):
    """Register custom Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('✅  Database tables created.')

    @app.cli.command('patch-db')
    def patch_db():
        """Apply schema updates to databases created by older releases."""
        from ledshop.migration import run_auto_migration
        applied = run_auto_migration(app)
        for change in applied:
            click.echo(f'✅ {change}')
        click.echo('✅ Schema patch complete.')

    @app.cli.command('create-user')
    @click.option('--email',    prompt='Email',     help='Login email')
    @click.option('--password', prompt=True, hide_input=True,
                  confirmation_prompt=True, help='Password')
    @click.option('--name',     default=None,       help='Display name')
    @click.option('--company',  default=None,       help='Company name')
    @click.option('--phone',    default=None,       help='Phone number')
    def create_user_command(email, password, name, company, phone):
        """Create a customer account (with its points row)."""
        from ledshop.auth.models import User
        from ledshop.auth.service import create_user

        if User.query.filter_by(email=email.strip().lower()).first():
            click.echo(f'⚠️  User "{email}" already exists.')
            return

        create_user(email=email, password=password, name=name,
                    company_name=company, phone=phone)
        db.session.commit()
        click.echo(f'✅  User "{email}" created successfully.')

    @app.cli.command('grant-admin')
    @click.argument('emails', nargs=-1, required=True)
    def grant_admin(emails):
        """Grant admin access (and all permissions) to users by email."""
        from ledshop.auth.models import User

        for email in emails:
            user = User.query.filter_by(email=email.strip().lower()).first()
            if user is None:
                click.echo(f'⚠️  No user with email "{email}".')
                continue
            user.is_admin = True
            user.can_view_prices = True
            user.can_order_products = True
            click.echo(f'✅  {user.email} is now an admin.')
        db.session.commit()

    @app.cli.command('add-points')
    @click.argument('email')
    @click.argument('amount', type=int)
    @click.option('--description', default='Manual adjustment', help='Ledger description')
    def add_points(email, amount, description):
        """Credit points to a user (writes a ledger row)."""
        from ledshop.auth.models import User
        from ledshop.points.service import adjust_points

        user = User.query.filter_by(email=email.strip().lower()).first()
        if user is None:
            click.echo(f'⚠️  No user with email "{email}".')
            return
        try:
            balance = adjust_points(user.id, amount, description)
        except ValueError as e:
            # InsufficientPoints is a ValueError too
            db.session.rollback()
            click.echo(f'⚠️  {e}')
            return
        db.session.commit()
        click.echo(f'✅  {user.email}: balance {balance.current_balance}, '
                   f'total {balance.total_accumulated}.')

    @app.cli.command('list-users')
    def list_users():
        """List accounts with their flags (diagnostic)."""
        from ledshop.auth.models import User
        users = User.query.order_by(User.created_at.desc()).all()
        if not users:
            click.echo('No users found.')
            return
        click.echo(f'{"ID":<6} {"Email":<40} {"Admin":<7} {"Prices":<8} {"Order"}')
        click.echo('─' * 70)
        for u in users:
            click.echo(f'{u.id:<6} {u.email:<40} {str(u.is_admin):<7} '
                       f'{str(u.can_view_prices):<8} {u.can_order_products}')
