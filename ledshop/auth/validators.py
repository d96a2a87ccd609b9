"""
ledshop/auth/validators.py
--------------------------
Validation for register / login bodies.
Returns a dict of field -> error_message; empty means valid.
"""
from ledshop.utils.validation import EMAIL_RE, check_optional_str

MIN_PASSWORD_LENGTH = 8


def validate_register(data: dict) -> dict:
    errors = {}

    email = data.get('email')
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        errors['email'] = 'Invalid email.'

    password = data.get('password')
    if not isinstance(password, str):
        errors['password'] = 'Password is required.'
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors['password'] = f'Password must be at least {MIN_PASSWORD_LENGTH} characters.'

    for field in ('name', 'company_name', 'phone'):
        check_optional_str(data, field, errors)

    return errors


def validate_login(data: dict) -> dict:
    errors = {}

    email = data.get('email')
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        errors['email'] = 'Invalid email.'

    if not isinstance(data.get('password'), str):
        errors['password'] = 'Password is required.'

    return errors
