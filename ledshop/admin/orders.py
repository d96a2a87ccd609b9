"""
ledshop/admin/orders.py
-----------------------
Order review: listing, detail, and status changes.
"""
from flask import request, jsonify, g, current_app

from ledshop import db
from ledshop.admin import admin
from ledshop.admin.validators import validate_status_change
from ledshop.auth.decorators import admin_required
from ledshop.notifications.service import notify_order_status, email_order_status
from ledshop.orders.models import Order, OrderTransitionError, ORDER_STATUSES
from ledshop.utils.validation import invalid_input, json_body


@admin.route('/orders/pending')
@admin_required
def pending_orders():
    rows = (Order.query
            .filter_by(status='pending')
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all())
    return jsonify({'orders': [o.to_admin_dict() for o in rows]})


@admin.route('/orders')
@admin_required
def all_orders():
    query = Order.query
    status = request.args.get('status')
    if status:
        if status not in ORDER_STATUSES:
            return invalid_input({'status': f'Must be one of: {", ".join(ORDER_STATUSES)}.'})
        query = query.filter_by(status=status)
    rows = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return jsonify({'orders': [o.to_admin_dict() for o in rows]})


@admin.route('/orders/<int:order_id>')
@admin_required
def order_detail(order_id):
    order = db.session.get(Order, order_id)
    if order is None:
        return jsonify({'error': 'Order not found'}), 404
    return jsonify({'order': order.to_admin_dict()})


@admin.route('/orders/<int:order_id>/approve', methods=['PATCH'])
@admin_required
def change_status(order_id):
    """
    Move an order through its lifecycle:
      1. Lock the order row
      2. Check the transition is allowed
      3. Commit the new status (and notes)
      4. Notify the customer; a failure here never undoes step 3
    """
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_status_change(data)
    if errors:
        return invalid_input(errors)

    order = (db.session.query(Order)
             .filter(Order.id == order_id)
             .with_for_update()
             .first())
    if order is None:
        return jsonify({'error': 'Order not found'}), 404

    try:
        old_status = order.transition_to(data['status'])
    except OrderTransitionError as e:
        db.session.rollback()
        current_app.logger.warning(f"Order #{order_id}: {e}")
        return jsonify({'error': str(e)}), 400

    if data.get('notes') is not None:
        order.admin_notes = data['notes']
    db.session.commit()
    current_app.logger.info(
        f"Order #{order.id} {old_status} → {order.status} by admin {g.user_id}"
    )

    try:
        notify_order_status(order)
    except Exception:
        db.session.rollback()
        current_app.logger.exception(f"Failed to create notification for order #{order.id}")

    try:
        email_order_status(order)
    except Exception:
        current_app.logger.exception(f"Failed to send status email for order #{order.id}")

    return jsonify({
        'success': True,
        'message': f'Order {order.status} successfully',
        'order':   {'id': order.id, 'status': order.status},
    })
