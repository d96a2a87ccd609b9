from flask import jsonify, g, current_app

from ledshop import db
from ledshop.auth.decorators import login_required
from ledshop.calculators.power import calculate_total_power
from ledshop.catalog.client import CatalogError
from ledshop.catalog.orders import create_square_order, order_total
from ledshop.orders import orders
from ledshop.orders.models import Order
from ledshop.orders.validators import (
    is_custom_order, validate_custom_order, validate_catalog_order, parse_custom_order,
)
from ledshop.points.service import award_purchase_points
from ledshop.utils.validation import invalid_input, json_body


def _fill_recommended_driver(config: dict) -> None:
    """Size a stock driver when the customer asked for one but didn't pick it."""
    if not config.get('includeDriver') or config.get('recommendedDriver'):
        return
    result = calculate_total_power(config.get('strips') or [], config.get('ledType'))
    if result.recommended_driver is not None:
        config['recommendedDriver'] = result.recommended_driver.specification


def _create_custom_order(data: dict):
    errors = validate_custom_order(data)
    if errors:
        return invalid_input(errors)

    config = parse_custom_order(data)
    _fill_recommended_driver(config)

    order = Order(user_id=g.user_id, status='pending', total_amount=0)
    order.config_dict = config
    db.session.add(order)
    db.session.commit()

    current_app.logger.info(f"Custom order #{order.id} submitted by user {g.user_id}")
    return jsonify({
        'order': {
            'id':         order.id,
            'status':     order.status,
            'created_at': order.created_at.isoformat(),
        },
        'message': 'Order submitted successfully. It will be reviewed and approved shortly.',
    }), 201


def _create_catalog_order(data: dict):
    errors = validate_catalog_order(data)
    if errors:
        return invalid_input(errors)
    if not data.get('lineItems'):
        return jsonify({'error': 'Line items are required for regular orders'}), 400
    if not g.user.can_order_products:
        return jsonify({'error': 'Your account is not enabled for ordering products'}), 403

    try:
        pos_order = create_square_order(
            line_items=data['lineItems'],
            reference_id=f'user_{g.user_id}',
            customer_id=data.get('customerId'),
        )
    except CatalogError as e:
        current_app.logger.error(f"POS order creation failed for user {g.user_id}: {e}")
        return jsonify({'error': 'Failed to create order'}), 502

    total = order_total(pos_order)
    try:
        order = Order(
            user_id=g.user_id,
            square_order_id=pos_order.get('id'),
            external_state=pos_order.get('state') or 'DRAFT',
            status='pending',
            total_amount=total,
        )
        db.session.add(order)
        db.session.flush()
        points_earned = award_purchase_points(g.user_id, order.id, total)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception(
            f"Saving POS order {pos_order.get('id')} failed for user {g.user_id}"
        )
        raise

    current_app.logger.info(
        f"Catalog order #{order.id} ({order.square_order_id}) total {total} "
        f"by user {g.user_id}, {points_earned} points"
    )
    return jsonify({
        'order': order.to_summary_dict(),
        'squareOrder': {
            'id':         pos_order.get('id'),
            'state':      pos_order.get('state'),
            'totalMoney': pos_order.get('total_money'),
        },
        'pointsEarned': points_earned,
    }), 201


@orders.route('/', methods=['POST'], strict_slashes=False)
@login_required
def create():
    """Configurator answers become a pending custom order; anything else goes to the POS."""
    data, failure = json_body()
    if failure:
        return failure
    if is_custom_order(data):
        return _create_custom_order(data)
    return _create_catalog_order(data)


@orders.route('/', methods=['GET'], strict_slashes=False)
@login_required
def index():
    rows = (Order.query
            .filter_by(user_id=g.user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all())
    return jsonify({'orders': [o.to_dict() for o in rows]})


@orders.route('/<int:order_id>', methods=['GET'])
@login_required
def detail(order_id):
    order = Order.query.filter_by(id=order_id, user_id=g.user_id).first()
    if order is None:
        return jsonify({'error': 'Order not found'}), 404
    return jsonify({'order': order.to_dict()})


@orders.route('/<int:order_id>', methods=['PUT'])
@login_required
def update(order_id):
    """Replace the configuration of one of the caller's pending custom orders."""
    data, failure = json_body()
    if failure:
        return failure

    order = (db.session.query(Order)
             .filter(Order.id == order_id)
             .with_for_update()
             .first())
    if order is None:
        return jsonify({'error': 'Order not found'}), 404
    if order.user_id != g.user_id:
        db.session.rollback()
        return jsonify({'error': 'You can only edit your own orders'}), 403
    if order.status != 'pending':
        db.session.rollback()
        return jsonify({'error': 'Only pending orders can be edited'}), 400
    if not order.is_custom or not is_custom_order(data):
        db.session.rollback()
        return jsonify({'error': 'Only custom LED orders can be edited through this endpoint'}), 400

    errors = validate_custom_order(data)
    if errors:
        db.session.rollback()
        return invalid_input(errors)

    config = parse_custom_order(data)
    _fill_recommended_driver(config)
    order.config_dict = config
    db.session.commit()

    current_app.logger.info(f"Order #{order.id} updated by user {g.user_id}")
    return jsonify({
        'order': {
            'id':         order.id,
            'status':     order.status,
            'updated_at': order.updated_at.isoformat(),
        },
        'message': 'Order updated successfully',
    })
