"""
ledshop/catalog/orders.py
-------------------------
Creating and reading orders in the point-of-sale system.
"""
import uuid
from decimal import Decimal
from typing import List

from flask import current_app

from ledshop.catalog import client


def create_square_order(line_items: List[dict], reference_id: str = None,
                        customer_id: str = None) -> dict:
    """
    Create an order at the configured location and return the POS order object.
    line_items use the storefront keys: catalogObjectId, quantity, name, note.
    """
    order = {
        'location_id': current_app.config['SQUARE_LOCATION_ID'],
        'line_items': [
            {
                'catalog_object_id': item['catalogObjectId'],
                'quantity':          item['quantity'],
                'name':              item['name'],
                'note':              item.get('note'),
            }
            for item in line_items
        ],
    }
    if reference_id:
        order['reference_id'] = reference_id
    if customer_id:
        order['customer_id'] = customer_id

    response = client.square_request('POST', '/v2/orders', {
        'idempotency_key': str(uuid.uuid4()),
        'order': order,
    })
    created = response.get('order')
    if not created:
        raise client.CatalogError('Order creation failed: no order returned')
    return created


def order_total(order: dict) -> Decimal:
    """total_money.amount is in cents."""
    amount = (order.get('total_money') or {}).get('amount')
    if not amount:
        return Decimal('0.00')
    return (Decimal(int(amount)) / 100).quantize(Decimal('0.01'))
