"""
ledshop/orders/validators.py
----------------------------
Validation for order bodies.
Returns a dict of field -> error_message; empty means valid.
Nested fields are keyed by path, e.g. 'strips.0.length'.
"""
from ledshop.utils.validation import (
    is_number, check_optional_str, check_optional_bool, check_optional_number,
)

ENVIRONMENTS     = ('indoor', 'outdoor', 'weatherproof')
COLOR_TYPES      = ('single', 'dual', 'rgb', 'rgbw')
CONNECTION_TYPES = ('tail', 'link')

# Configurator answers persisted in orders.custom_order_data, in this order
CUSTOM_ORDER_FIELDS = (
    'environment', 'colorType', 'ledType', 'length', 'tailWireLength',
    'strips', 'includeDriver', 'includeProfile', 'selectedProfile',
    'includeEndCaps', 'accessories', 'notes', 'projectName', 'company',
    'customerName', 'mobile', 'recommendedDriver',
)


def is_custom_order(data: dict) -> bool:
    """A body with an environment answer comes from the LED configurator."""
    return bool(data.get('environment'))


def validate_custom_order(data: dict) -> dict:
    errors = {}

    # ── enums ─────────────────────────────────────────────────────
    if data.get('environment') not in ENVIRONMENTS:
        errors['environment'] = f'Must be one of: {", ".join(ENVIRONMENTS)}.'
    if 'colorType' in data and data['colorType'] not in COLOR_TYPES:
        errors['colorType'] = f'Must be one of: {", ".join(COLOR_TYPES)}.'

    # ── scalars ───────────────────────────────────────────────────
    for field in ('ledType', 'notes', 'projectName', 'company',
                  'customerName', 'mobile', 'recommendedDriver'):
        check_optional_str(data, field, errors)
    check_optional_str(data, 'selectedProfile', errors, allow_null=True)
    for field in ('length', 'tailWireLength'):
        check_optional_number(data, field, errors)
    for field in ('includeDriver', 'includeProfile', 'includeEndCaps'):
        check_optional_bool(data, field, errors)

    if 'accessories' in data and data['accessories'] is not None \
            and not isinstance(data['accessories'], list):
        errors['accessories'] = 'Expected array.'

    # ── strips ────────────────────────────────────────────────────
    strips = data.get('strips')
    if strips is not None:
        if not isinstance(strips, list):
            errors['strips'] = 'Expected array.'
        else:
            for i, strip in enumerate(strips):
                errors.update(_validate_strip(strip, f'strips.{i}'))

    return errors


def _validate_strip(strip, prefix: str) -> dict:
    if not isinstance(strip, dict):
        return {prefix: 'Expected object.'}

    errors = {}
    if not is_number(strip.get('length')):
        errors[f'{prefix}.length'] = 'Expected number.'
    if strip.get('connectionType') not in CONNECTION_TYPES:
        errors[f'{prefix}.connectionType'] = 'Must be "tail" or "link".'
    if not is_number(strip.get('connectionLength')):
        errors[f'{prefix}.connectionLength'] = 'Expected number.'
    return errors


def validate_catalog_order(data: dict) -> dict:
    """Shape checks only; an empty lineItems list is handled by the route."""
    errors = {}
    check_optional_str(data, 'customerId', errors)

    line_items = data.get('lineItems')
    if line_items is None:
        return errors
    if not isinstance(line_items, list):
        errors['lineItems'] = 'Expected array.'
        return errors

    for i, item in enumerate(line_items):
        prefix = f'lineItems.{i}'
        if not isinstance(item, dict):
            errors[prefix] = 'Expected object.'
            continue
        for field in ('catalogObjectId', 'quantity', 'name'):
            if not isinstance(item.get(field), str) or not item[field].strip():
                errors[f'{prefix}.{field}'] = 'Required.'
        if item.get('note') is not None and not isinstance(item['note'], str):
            errors[f'{prefix}.note'] = 'Expected string.'
        if f'{prefix}.quantity' not in errors and not item['quantity'].strip().isdigit():
            errors[f'{prefix}.quantity'] = 'Quantity must be a whole number string.'
    return errors


def parse_custom_order(data: dict) -> dict:
    """
    Keep only the configurator answers, in a stable order.
    Call only after validate_custom_order returns no errors.
    """
    return {field: data.get(field) for field in CUSTOM_ORDER_FIELDS}
