"""
ledshop/points/service.py
-------------------------
Points accrual and redemption.

Consistency rule
────────────────
user_points holds denormalised totals of the points_transactions ledger.
Every change goes through _credit() / _debit(), which lock the user's
user_points row with SELECT … FOR UPDATE and add the ledger row in the same
session. Nothing here commits except redeem_item() and award_visit_points(),
which own their whole transaction; every other caller commits once after
its own writes, so the balance update, the ledger insert and the caller's
row (order, photo) land together or not at all.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_FLOOR
from typing import List

from ledshop import db
from ledshop.points.models import (
    UserPoints, PointsTransaction, PointsShopItem, PointsRedemption,
)

logger = logging.getLogger(__name__)

# ── Earning rules ─────────────────────────────────────────────────
VISIT_POINTS        = 1
VISIT_INTERVAL      = timedelta(hours=24)
PHOTO_UPLOAD_POINTS = 5
DOLLARS_PER_POINT   = Decimal('10')


class RedemptionError(ValueError):
    """A redemption that must be refused. status_code is the HTTP status to return."""
    status_code = 400


class ItemNotFound(RedemptionError):
    status_code = 404


class OutOfStock(RedemptionError):
    pass


class InsufficientPoints(RedemptionError):
    pass


# ── Balance row ───────────────────────────────────────────────────

def _locked_balance(user_id: int) -> UserPoints:
    """Return the user's points row locked FOR UPDATE, creating it if missing."""
    row = (
        db.session.query(UserPoints)
        .filter(UserPoints.user_id == user_id)
        .with_for_update()
        .first()
    )
    if row is None:
        row = UserPoints(user_id=user_id, current_balance=0, total_accumulated=0)
        db.session.add(row)
        db.session.flush()
    return row


def _credit(user_id: int, amount: int, description: str,
            reference_type: str, reference_id: int = None) -> UserPoints:
    balance = _locked_balance(user_id)
    balance.current_balance += amount
    balance.total_accumulated += amount
    db.session.add(PointsTransaction(
        user_id=user_id,
        type='earned',
        amount=amount,
        description=description,
        reference_id=reference_id,
        reference_type=reference_type,
    ))
    db.session.flush()
    return balance


def _debit(balance: UserPoints, amount: int, description: str,
           reference_type: str, reference_id: int = None) -> UserPoints:
    """Spend from an already-locked balance. total_accumulated never goes down."""
    balance.current_balance -= amount
    db.session.add(PointsTransaction(
        user_id=balance.user_id,
        type='spent',
        amount=amount,
        description=description,
        reference_id=reference_id,
        reference_type=reference_type,
    ))
    db.session.flush()
    return balance


# ── Earning ───────────────────────────────────────────────────────

def award_visit_points(user_id: int, now: datetime = None) -> dict:
    """
    Grant the daily visit point when the previous grant is more than 24h old.
    Returns {'awarded': bool, 'points': int}.
    """
    now = now or datetime.utcnow()
    balance = _locked_balance(user_id)

    if balance.last_visit_date is not None and balance.last_visit_date > now - VISIT_INTERVAL:
        db.session.rollback()   # release the row lock
        return {'awarded': False, 'points': 0}

    _credit(user_id, VISIT_POINTS, 'Daily site visit', 'visit')
    balance.last_visit_date = now
    db.session.commit()
    return {'awarded': True, 'points': VISIT_POINTS}


def purchase_points_for(total_amount) -> int:
    """1 point per $10 spent, rounded down."""
    total = Decimal(str(total_amount))
    if total <= 0:
        return 0
    return int((total / DOLLARS_PER_POINT).to_integral_value(rounding=ROUND_FLOOR))


def award_purchase_points(user_id: int, order_id: int, total_amount) -> int:
    """Credit purchase points for an order. Caller commits."""
    earned = purchase_points_for(total_amount)
    if earned > 0:
        total = Decimal(str(total_amount)).quantize(Decimal('0.01'))
        _credit(user_id, earned, f'Purchase points: ${total}', 'order', order_id)
    return earned


def award_photo_points(user_id: int, photo_id: int) -> int:
    """Credit the photo upload bonus. Caller commits."""
    _credit(user_id, PHOTO_UPLOAD_POINTS, 'Photo upload', 'photo', photo_id)
    return PHOTO_UPLOAD_POINTS


def adjust_points(user_id: int, amount: int, description: str) -> UserPoints:
    """
    Manual admin adjustment. Positive amounts credit, negative amounts spend
    (never below zero). Caller commits.
    """
    if amount == 0:
        raise ValueError('Adjustment amount must not be zero.')
    if amount > 0:
        return _credit(user_id, amount, description, 'adjustment')

    balance = _locked_balance(user_id)
    if balance.current_balance < -amount:
        raise InsufficientPoints('Insufficient points')
    return _debit(balance, -amount, description, 'adjustment')


# ── Reading ───────────────────────────────────────────────────────

def get_user_points(user_id: int) -> dict:
    """{'current', 'total'}; creates the row for accounts that predate it."""
    row = UserPoints.query.filter_by(user_id=user_id).first()
    if row is None:
        row = UserPoints(user_id=user_id, current_balance=0, total_accumulated=0)
        db.session.add(row)
        db.session.commit()
    return row.to_dict()


def get_points_transactions(user_id: int, limit: int = 50) -> List[PointsTransaction]:
    return (
        PointsTransaction.query
        .filter_by(user_id=user_id)
        .order_by(PointsTransaction.created_at.desc(), PointsTransaction.id.desc())
        .limit(limit)
        .all()
    )


# ── Redemption ────────────────────────────────────────────────────

def redeem_item(user_id: int, item_id: int) -> dict:
    """
    Spend points on a shop item, all-or-nothing:
      1. Lock the item row, then the user's points row (fixed order → no deadlock)
      2. Verify the item is active, in stock, and affordable
      3. Decrement stock, debit the balance, write the ledger + redemption rows
      4. Commit

    Raises a RedemptionError subclass (after rolling back) when refused.
    """
    try:
        item = (
            db.session.query(PointsShopItem)
            .filter(PointsShopItem.id == item_id, PointsShopItem.active.is_(True))
            .with_for_update()
            .first()
        )
        if item is None:
            raise ItemNotFound('Item not found')
        if item.stock_quantity <= 0:
            raise OutOfStock('Item out of stock')

        balance = _locked_balance(user_id)
        if balance.current_balance < item.point_cost:
            raise InsufficientPoints('Insufficient points')

        item.stock_quantity -= 1
        _debit(balance, item.point_cost, f'Redeemed: {item.name}', 'redemption', item.id)

        redemption = PointsRedemption(
            user_id=user_id,
            item_id=item.id,
            points_spent=item.point_cost,
            status='pending',
        )
        db.session.add(redemption)
        db.session.commit()
    except RedemptionError:
        db.session.rollback()
        raise

    logger.info(f"User {user_id} redeemed item {item_id} for {redemption.points_spent} points")
    return {
        'success':         True,
        'redemptionId':    redemption.id,
        'remainingPoints': balance.current_balance,
    }


# ── Leaderboard ───────────────────────────────────────────────────

def get_leaderboard(limit: int = 100) -> List[dict]:
    """Users with any accumulated points, highest first, ranked from 1."""
    from ledshop.auth.models import User

    rows = (
        db.session.query(UserPoints.user_id, User.email, User.company_name,
                         UserPoints.total_accumulated)
        .join(User, User.id == UserPoints.user_id)
        .filter(UserPoints.total_accumulated > 0)
        .order_by(UserPoints.total_accumulated.desc(), UserPoints.user_id)
        .limit(limit)
        .all()
    )
    return [
        {
            'rank':              rank,
            'user_id':           user_id,
            'email':             email,
            'company_name':      company_name,
            'total_accumulated': total,
        }
        for rank, (user_id, email, company_name, total) in enumerate(rows, start=1)
    ]
