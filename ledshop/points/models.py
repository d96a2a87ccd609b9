"""
ledshop/points/models.py
------------------------
Loyalty points: per-user balance, the append-only ledger, and the shop.

UserPoints.current_balance / total_accumulated are denormalised totals of
the PointsTransaction ledger. They are only ever changed by
ledshop.points.service, in the same transaction as the ledger insert.
"""
from datetime import datetime
from ledshop import db


TRANSACTION_TYPES = ('earned', 'spent')
REFERENCE_TYPES   = ('visit', 'order', 'photo', 'redemption', 'adjustment')


class UserPoints(db.Model):
    """One row per user, created at registration."""
    __tablename__ = 'user_points'

    id                = db.Column(db.Integer, primary_key=True)
    user_id           = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                                  unique=True, nullable=False, index=True)
    current_balance   = db.Column(db.Integer, nullable=False, default=0)
    total_accumulated = db.Column(db.Integer, nullable=False, default=0)
    last_visit_date   = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.CheckConstraint('current_balance >= 0', name='check_points_balance_non_negative'),
    )

    def to_dict(self) -> dict:
        return {'current': self.current_balance, 'total': self.total_accumulated}

    def __repr__(self):
        return f"<UserPoints user={self.user_id} bal={self.current_balance} total={self.total_accumulated}>"


class PointsTransaction(db.Model):
    """Ledger entry. Amount is always positive; `type` gives the direction."""
    __tablename__ = 'points_transactions'

    id             = db.Column(db.Integer, primary_key=True)
    user_id        = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                               nullable=False, index=True)
    type           = db.Column(db.String(10),  nullable=False)   # see TRANSACTION_TYPES
    amount         = db.Column(db.Integer,     nullable=False)
    description    = db.Column(db.String(255), nullable=False)
    reference_id   = db.Column(db.Integer,     nullable=True)
    reference_type = db.Column(db.String(20),  nullable=True)    # see REFERENCE_TYPES
    created_at     = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        db.CheckConstraint('amount > 0', name='check_points_amount_positive'),
    )

    def to_dict(self) -> dict:
        return {
            'id':             self.id,
            'user_id':        self.user_id,
            'type':           self.type,
            'amount':         self.amount,
            'description':    self.description,
            'reference_id':   self.reference_id,
            'reference_type': self.reference_type,
            'created_at':     self.created_at.isoformat(),
        }

    def __repr__(self):
        return f"<PointsTransaction user={self.user_id} {self.type} {self.amount}>"


class PointsShopItem(db.Model):
    """A reward redeemable for points. Deleting an item is a hard delete."""
    __tablename__ = 'points_shop_items'

    id             = db.Column(db.Integer, primary_key=True)
    name           = db.Column(db.String(255), nullable=False)
    description    = db.Column(db.Text,        nullable=True)
    point_cost     = db.Column(db.Integer,     nullable=False)
    image_url      = db.Column(db.String(500), nullable=True)
    image_key      = db.Column(db.String(500), nullable=True)    # storage key of image_url
    stock_quantity = db.Column(db.Integer,     nullable=False, default=0)
    active         = db.Column(db.Boolean,     nullable=False, default=True)
    created_at     = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at     = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                               onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('stock_quantity >= 0', name='check_shop_stock_non_negative'),
        db.CheckConstraint('point_cost > 0', name='check_shop_cost_positive'),
    )

    def to_dict(self, admin: bool = False) -> dict:
        data = {
            'id':             self.id,
            'name':           self.name,
            'description':    self.description,
            'point_cost':     self.point_cost,
            'image_url':      self.image_url,
            'stock_quantity': self.stock_quantity,
            'active':         self.active,
        }
        if admin:
            data['created_at'] = self.created_at.isoformat()
            data['updated_at'] = self.updated_at.isoformat()
        return data

    def __repr__(self):
        return f"<PointsShopItem {self.name!r} cost={self.point_cost} stock={self.stock_quantity}>"


class PointsRedemption(db.Model):
    """
    A user's claim on a shop item. item_id is nulled when the item is
    hard-deleted so the redemption history survives.
    """
    __tablename__ = 'points_redemptions'

    id           = db.Column(db.Integer, primary_key=True)
    user_id      = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                             nullable=False, index=True)
    item_id      = db.Column(db.Integer, db.ForeignKey('points_shop_items.id', ondelete='SET NULL'),
                             nullable=True)
    points_spent = db.Column(db.Integer,    nullable=False)
    status       = db.Column(db.String(20), nullable=False, default='pending')
    created_at   = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    item = db.relationship('PointsShopItem', lazy='select',
                           backref='redemptions')

    def to_dict(self) -> dict:
        return {
            'id':           self.id,
            'item_id':      self.item_id,
            'item_name':    self.item.name if self.item else None,
            'points_spent': self.points_spent,
            'status':       self.status,
            'created_at':   self.created_at.isoformat(),
        }

    def __repr__(self):
        return f"<PointsRedemption user={self.user_id} item={self.item_id} pts={self.points_spent}>"
