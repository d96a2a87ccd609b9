"""
ledshop/utils/validation.py
---------------------------
Small shared checks for JSON request bodies.

Each domain keeps its own validators.py (validate_* returns a dict of
field -> error message, empty when valid; parse_* converts afterwards).
These helpers only cover the type tests they all repeat.
"""
import re
from flask import jsonify, request

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def is_number(value) -> bool:
    """True for int/float JSON values (bool is excluded even though it is an int)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_optional_str(data: dict, field: str, errors: dict, allow_null: bool = False) -> None:
    value = data.get(field)
    if value is None:
        if field in data and not allow_null:
            errors[field] = 'Expected string, received null.'
        return
    if not isinstance(value, str):
        errors[field] = 'Expected string.'


def check_optional_bool(data: dict, field: str, errors: dict) -> None:
    if field in data and not isinstance(data[field], bool):
        errors[field] = 'Expected boolean.'


def check_optional_number(data: dict, field: str, errors: dict) -> None:
    if field in data and data[field] is not None and not is_number(data[field]):
        errors[field] = 'Expected number.'


def invalid_input(errors: dict):
    """Standard 400 response for a body that failed validation."""
    return jsonify({'error': 'Invalid input', 'details': errors}), 400


def parse_form_bool(value) -> bool:
    """Multipart forms send booleans as strings."""
    return value in ('1', 'true', 'True', 'on', 'yes', True)


def json_body():
    """
    The request's JSON object as (data, None), or (None, 400 response) when
    the body is a list, a scalar, or not JSON. A missing body reads as {}.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}, None
    if not isinstance(data, dict):
        return None, invalid_input({'body': 'Expected object.'})
    return data, None
