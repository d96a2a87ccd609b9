"""
ledshop/auth/service.py
-----------------------
Account creation and credential checks.
Callers own the transaction: nothing here commits.
"""
from typing import Optional

from ledshop import db
from ledshop.auth.models import User
from ledshop.points.models import UserPoints


def normalise_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(email: str) -> Optional[User]:
    return User.query.filter_by(email=normalise_email(email)).first()


def create_user(email: str, password: str, name: str = None,
                company_name: str = None, phone: str = None) -> User:
    """
    Insert the user and its points row in the caller's transaction.
    Every account owns exactly one user_points row from creation.
    """
    user = User(
        email=normalise_email(email),
        name=name or None,
        company_name=company_name or None,
        phone=phone or None,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.flush()   # assigns user.id

    db.session.add(UserPoints(user_id=user.id, current_balance=0, total_accumulated=0))
    db.session.flush()
    return user


def authenticate(email: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, else None."""
    user = get_user_by_email(email)
    if user is None or not user.check_password(password):
        return None
    return user
