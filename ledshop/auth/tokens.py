"""
ledshop/auth/tokens.py
----------------------
Bearer token issue / verification (HS256 JWT).

The token only carries the user id. Admin status is never trusted from the
token: admin_required re-reads users.is_admin on every request.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from flask import current_app
from jose import JWTError, jwt


def generate_token(user_id: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'iat': now,
        'exp': now + timedelta(days=current_app.config['JWT_EXPIRES_DAYS']),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'],
                      algorithm=current_app.config['JWT_ALGORITHM'])


def decode_token(token: str) -> Optional[int]:
    """Return the user id carried by `token`, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, current_app.config['JWT_SECRET'],
                             algorithms=[current_app.config['JWT_ALGORITHM']])
    except JWTError:
        return None

    try:
        return int(payload.get('sub'))
    except (TypeError, ValueError):
        return None
