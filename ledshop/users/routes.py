from flask import jsonify, g

from ledshop import db
from ledshop.auth.decorators import login_required
from ledshop.auth.models import User
from ledshop.orders.models import Order
from ledshop.points.service import get_user_points
from ledshop.users import users


@users.route('/', methods=['GET'], strict_slashes=False)
@users.route('/me', methods=['GET'])
@login_required
def profile():
    """The caller's profile, permission flags and points."""
    user = db.session.get(User, g.user_id)
    if user is None:
        return jsonify({'error': 'User not found'}), 404

    data = user.to_public_dict()
    data.update({
        'created_at':         user.created_at.isoformat(),
        'is_admin':           user.is_admin,
        'can_view_prices':    user.can_view_prices,
        'can_order_products': user.can_order_products,
        'points':             get_user_points(user.id),
    })
    return jsonify(data)


@users.route('/orders', methods=['GET'])
@login_required
def order_history():
    rows = (Order.query
            .filter_by(user_id=g.user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all())
    return jsonify([o.to_summary_dict() for o in rows])
