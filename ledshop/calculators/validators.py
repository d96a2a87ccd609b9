"""
ledshop/calculators/validators.py
---------------------------------
Validation for calculator request bodies.
Returns a dict of field -> error_message; empty means valid.
"""
import re

from ledshop.utils.validation import is_number, is_int, check_optional_str

VOLTAGE_RE = re.compile(r'^(12V|24V)$')


def validate_recommendation(data: dict) -> dict:
    errors = {}
    total = data.get('totalWatts')
    if not is_number(total) or total <= 0:
        errors['totalWatts'] = 'Must be a positive number.'

    voltage = data.get('voltage')
    if not isinstance(voltage, str) or not VOLTAGE_RE.fullmatch(voltage):
        errors['voltage'] = 'Must be 12V or 24V.'

    margin = data.get('safetyMargin')
    if margin is not None and (not is_number(margin) or not 1 <= margin <= 2):
        errors['safetyMargin'] = 'Must be between 1 and 2.'
    return errors


def _validate_pieces(pieces, field: str, quantity_required: bool) -> dict:
    if not isinstance(pieces, list):
        return {field: 'Expected array.'}

    errors = {}
    for i, piece in enumerate(pieces):
        prefix = f'{field}.{i}'
        if not isinstance(piece, dict):
            errors[prefix] = 'Expected object.'
            continue
        if not is_number(piece.get('length')) or piece['length'] < 0:
            errors[f'{prefix}.length'] = 'Must be a non-negative number.'
        if 'quantity' in piece or quantity_required:
            qty = piece.get('quantity')
            if not is_int(qty) or qty < 1:
                errors[f'{prefix}.quantity'] = 'Must be a whole number of at least 1.'
    return errors


def validate_power(data: dict) -> dict:
    errors = _validate_pieces(data.get('strips'), 'strips', quantity_required=False)
    check_optional_str(data, 'ledType', errors, allow_null=True)
    return errors


def validate_profile(data: dict) -> dict:
    errors = {}
    required = data.get('requiredLength', 0)
    if not is_number(required) or required < 0:
        errors['requiredLength'] = 'Must be a non-negative number.'

    errors.update(_validate_pieces(data.get('cutLengths', []), 'cutLengths', quantity_required=True))

    price = data.get('pricePerMeter')
    if not is_number(price) or price < 0:
        errors['pricePerMeter'] = 'Must be a non-negative number.'

    fee = data.get('cuttingFeePerCut')
    if fee is not None and (not is_number(fee) or fee < 0):
        errors['cuttingFeePerCut'] = 'Must be a non-negative number.'
    return errors
