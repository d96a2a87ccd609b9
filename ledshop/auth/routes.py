from flask import jsonify, current_app
from sqlalchemy.exc import IntegrityError

from ledshop import db
from ledshop.auth import auth
from ledshop.auth.service import authenticate, create_user, get_user_by_email
from ledshop.auth.tokens import generate_token
from ledshop.auth.validators import validate_login, validate_register
from ledshop.utils.validation import invalid_input, json_body


@auth.route('/register', methods=['POST'])
def register():
    """Create an account and return it with a bearer token."""
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_register(data)
    if errors:
        return invalid_input(errors)

    # Route-level uniqueness check (fast path, avoids an IntegrityError)
    if get_user_by_email(data['email']):
        return jsonify({'error': 'Email already registered'}), 400

    try:
        user = create_user(
            email=data['email'],
            password=data['password'],
            name=data.get('name'),
            company_name=data.get('company_name'),
            phone=data.get('phone'),
        )
        db.session.commit()
    except IntegrityError:
        # Race condition: another request registered the same email between
        # our check above and this commit.
        db.session.rollback()
        return jsonify({'error': 'Email already registered'}), 400

    current_app.logger.info(f"New account registered: {user.email}")
    return jsonify({'user': user.to_public_dict(), 'token': generate_token(user.id)}), 201


@auth.route('/login', methods=['POST'])
def login():
    """Exchange email + password for a bearer token."""
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_login(data)
    if errors:
        return invalid_input(errors)

    user = authenticate(data['email'], data['password'])
    if user is None:
        # Same message for both cases; the caller never learns which field was wrong
        current_app.logger.warning(f"Failed login attempt for email: {data['email']}")
        return jsonify({'error': 'Invalid email or password'}), 401

    current_app.logger.info(f"User {user.email} logged in successfully.")
    return jsonify({'user': user.to_public_dict(), 'token': generate_token(user.id)})
