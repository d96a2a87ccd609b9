"""
ledshop/admin/users.py
----------------------
Customer accounts: listing, permission flags, and manual points adjustments.
"""
from flask import jsonify, g, current_app
from sqlalchemy import func

from ledshop import db
from ledshop.admin import admin
from ledshop.admin.validators import PERMISSION_FIELDS, validate_permissions, validate_points_adjustment
from ledshop.auth.decorators import admin_required
from ledshop.auth.models import User
from ledshop.orders.models import Order
from ledshop.points.models import UserPoints
from ledshop.points.service import RedemptionError, adjust_points
from ledshop.utils.validation import invalid_input, json_body


def _user_rows(user_id=None):
    """Users with their points and order counts, newest account first."""
    order_counts = (db.session.query(Order.user_id, func.count(Order.id).label('order_count'))
                    .group_by(Order.user_id)
                    .subquery())
    query = (db.session.query(User, UserPoints, order_counts.c.order_count)
             .outerjoin(UserPoints, UserPoints.user_id == User.id)
             .outerjoin(order_counts, order_counts.c.user_id == User.id))
    if user_id is not None:
        query = query.filter(User.id == user_id)
    return query.order_by(User.created_at.desc(), User.id.desc()).all()


def _user_dict(user, points, order_count) -> dict:
    data = user.to_public_dict()
    data.update({
        'is_admin':           user.is_admin,
        'can_view_prices':    user.can_view_prices,
        'can_order_products': user.can_order_products,
        'created_at':         user.created_at.isoformat(),
        'points_balance':     points.current_balance if points else 0,
        'points_total':       points.total_accumulated if points else 0,
        'order_count':        int(order_count or 0),
    })
    return data


@admin.route('/users', methods=['GET'])
@admin_required
def list_users():
    return jsonify({'users': [_user_dict(*row) for row in _user_rows()]})


@admin.route('/users/<int:user_id>', methods=['GET'])
@admin_required
def get_user(user_id):
    rows = _user_rows(user_id)
    if not rows:
        return jsonify({'error': 'User not found'}), 404
    return jsonify({'user': _user_dict(*rows[0])})


@admin.route('/users/<int:user_id>/permissions', methods=['PATCH'])
@admin_required
def update_permissions(user_id):
    """
    Granting admin also grants both permissions unless the body sets them.
    An admin cannot revoke their own admin flag.
    """
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_permissions(data)
    if errors:
        return invalid_input(errors)

    changes = {field: data[field] for field in PERMISSION_FIELDS if field in data}
    if not changes:
        return jsonify({'error': 'No fields to update'}), 400
    if user_id == g.user_id and changes.get('is_admin') is False:
        return jsonify({'error': 'Cannot remove your own admin status'}), 400

    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({'error': 'User not found'}), 404

    if changes.get('is_admin'):
        changes.setdefault('can_view_prices', True)
        changes.setdefault('can_order_products', True)
    for field, value in changes.items():
        setattr(user, field, value)
    db.session.commit()

    current_app.logger.info(f"Permissions for {user.email} set to {changes} by admin {g.user_id}")
    data = user.to_public_dict()
    data.update({
        'is_admin':           user.is_admin,
        'can_view_prices':    user.can_view_prices,
        'can_order_products': user.can_order_products,
        'created_at':         user.created_at.isoformat(),
    })
    return jsonify({'user': data})


@admin.route('/users/<int:user_id>/points', methods=['POST'])
@admin_required
def adjust_user_points(user_id):
    """Credit (positive amount) or debit (negative) a user's points."""
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_points_adjustment(data)
    if errors:
        return invalid_input(errors)
    if db.session.get(User, user_id) is None:
        return jsonify({'error': 'User not found'}), 404

    description = (data.get('description') or '').strip() or 'Manual adjustment'
    try:
        balance = adjust_points(user_id, data['amount'], description)
        db.session.commit()
    except RedemptionError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400

    current_app.logger.info(
        f"Admin {g.user_id} adjusted points for user {user_id} by {data['amount']}"
    )
    return jsonify({'points': balance.to_dict()})
