"""
ledshop/admin/validators.py
---------------------------
Validation for admin bodies.

JSON bodies: validate_* returns {field: message}, empty when valid.
Shop item forms arrive as multipart strings: validate_shop_item_form checks
them and parse_shop_item_form converts the fields that were sent.
"""
from ledshop.orders.models import ORDER_STATUSES
from ledshop.utils.validation import (
    is_int, check_optional_str, check_optional_bool, check_optional_number, parse_form_bool,
)

PERMISSION_FIELDS = ('can_view_prices', 'can_order_products', 'is_admin')


def validate_status_change(data: dict) -> dict:
    errors = {}
    if data.get('status') not in ORDER_STATUSES:
        errors['status'] = f'Must be one of: {", ".join(ORDER_STATUSES)}.'
    check_optional_str(data, 'notes', errors)
    return errors


def _check_required_name(data: dict, field: str, errors: dict) -> None:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        errors[field] = 'Required.'


def validate_category(data: dict, partial: bool = False) -> dict:
    """partial=True for updates: only the keys present are checked."""
    errors = {}
    for field in ('name', 'display_name'):
        if not partial or field in data:
            _check_required_name(data, field, errors)
    check_optional_str(data, 'description', errors, allow_null=True)
    check_optional_bool(data, 'is_active', errors)
    check_optional_number(data, 'display_order', errors)
    if not partial:
        check_optional_str(data, 'square_category_id', errors, allow_null=True)
    return errors


def validate_assignment(data: dict) -> dict:
    errors = {}
    if not is_int(data.get('categoryId')):
        errors['categoryId'] = 'Expected integer.'
    check_optional_bool(data, 'isPrimary', errors)
    return errors


def validate_bulk_assignment(data: dict) -> dict:
    errors = {}
    product_ids = data.get('productIds')
    if not isinstance(product_ids, list) or not all(isinstance(p, str) for p in product_ids):
        errors['productIds'] = 'Expected array of strings.'
    if not is_int(data.get('categoryId')):
        errors['categoryId'] = 'Expected integer.'
    return errors


def validate_permissions(data: dict) -> dict:
    errors = {}
    for field in PERMISSION_FIELDS:
        check_optional_bool(data, field, errors)
    return errors


def validate_points_adjustment(data: dict) -> dict:
    errors = {}
    amount = data.get('amount')
    if not is_int(amount) or amount == 0:
        errors['amount'] = 'Must be a non-zero whole number.'
    check_optional_str(data, 'description', errors)
    return errors


def _check_form_int(form: dict, field: str, minimum: int, errors: dict) -> None:
    raw = (form.get(field) or '').strip()
    try:
        value = int(raw)
    except ValueError:
        errors[field] = 'Must be a whole number.'
        return
    if value < minimum:
        errors[field] = f'Must be at least {minimum}.'


def validate_shop_item_form(form: dict, partial: bool = False) -> dict:
    """
    form: request.form as a dict. On create, name and point_cost are
    required; stock_quantity defaults to 0.
    """
    errors = {}
    if not partial or 'name' in form:
        if not (form.get('name') or '').strip():
            errors['name'] = 'Required.'
    if not partial or 'point_cost' in form:
        _check_form_int(form, 'point_cost', 1, errors)
    if 'stock_quantity' in form:
        _check_form_int(form, 'stock_quantity', 0, errors)
    return errors


def parse_shop_item_form(form: dict, partial: bool = False) -> dict:
    """
    Convert validated form strings. With partial=True only the fields that
    were sent are returned. Call only after validate_shop_item_form passes.
    """
    parsed = {}
    if 'name' in form:
        parsed['name'] = form['name'].strip()
    if 'description' in form:
        parsed['description'] = form['description'] or None
    if 'point_cost' in form:
        parsed['point_cost'] = int(form['point_cost'])
    if 'stock_quantity' in form:
        parsed['stock_quantity'] = int(form['stock_quantity'])
    if 'active' in form:
        parsed['active'] = parse_form_bool(form['active'])

    if not partial:
        parsed.setdefault('description', None)
        parsed.setdefault('stock_quantity', 0)
        parsed.setdefault('active', False)
    return parsed
