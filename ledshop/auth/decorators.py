"""
ledshop/auth/decorators.py
--------------------------
Reusable route-protection decorators.
Usage:
    from ledshop.auth.decorators import login_required, admin_required

    @orders.route('/', methods=['POST'])
    @login_required
    def create():
        user_id = g.user_id
        ...

    @admin.route('/orders')
    @admin_required
    def all_orders():
        ...
"""
from functools import wraps
from flask import g, request, abort

from ledshop import db
from ledshop.auth.tokens import decode_token


def _authenticate():
    """
    Resolve the bearer token into g.user_id / g.user.
    Aborts with 401 when the header is missing, the token is invalid or
    expired, or the account no longer exists.
    """
    from ledshop.auth.models import User

    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        abort(401, description='Access token required')

    user_id = decode_token(token.strip())
    if user_id is None:
        abort(401, description='Invalid or expired token')

    user = db.session.get(User, user_id)
    if user is None:
        abort(401, description='Invalid or expired token')

    g.user_id = user.id
    g.user = user


def login_required(f):
    """Reject the request with 401 unless it carries a valid bearer token."""
    @wraps(f)
    def decorated(*args, **kwargs):
        _authenticate()
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """
    Allow access only to users whose is_admin flag is set.
    Implies login_required. The flag is read from the database on every
    request, so revoking admin takes effect immediately.
    Authenticated non-admins receive a 403 Forbidden response.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        _authenticate()
        if not g.user.is_admin:
            abort(403, description='Admin access required')
        return f(*args, **kwargs)
    return decorated
