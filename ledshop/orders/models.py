"""
ledshop/orders/models.py
------------------------
Order model and its approval workflow.

Two kinds of order share the table:
  custom LED order → custom_order_data holds the configurator answers,
                     total_amount stays 0 until the shop prices it
  catalog order    → square_order_id / external_state mirror the order
                     created in the point-of-sale system

Status lifecycle (changed by admins only):
  pending   → approved | rejected
  approved  → picked_up
  picked_up → approved
  rejected is terminal.
"""
import json
from datetime import datetime
from decimal import Decimal
from ledshop import db


ORDER_STATUSES = ('pending', 'approved', 'rejected', 'picked_up')

ALLOWED_TRANSITIONS = {
    'pending':   {'approved', 'rejected'},
    'approved':  {'picked_up'},
    'picked_up': {'approved'},
    'rejected':  set(),
}


class OrderTransitionError(ValueError):
    """Raised when a status change is not allowed from the current status."""


class Order(db.Model):
    __tablename__ = 'orders'

    id                = db.Column(db.Integer, primary_key=True)
    user_id           = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                                  nullable=False, index=True)
    square_order_id   = db.Column(db.String(255), nullable=True, unique=True)
    external_state    = db.Column(db.String(50),  nullable=True)    # POS order state, e.g. OPEN
    status            = db.Column(db.String(20),  nullable=False, default='pending', index=True)
    total_amount      = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    custom_order_data = db.Column(db.Text, nullable=True)           # JSON string
    admin_notes       = db.Column(db.Text, nullable=True)
    created_at        = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at        = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                                  onupdate=datetime.utcnow)

    user = db.relationship('User', lazy='select',
                           backref=db.backref('orders', lazy='dynamic', cascade='all, delete-orphan'))

    # ── Helpers ───────────────────────────────────────────────────

    @property
    def config_dict(self):
        """Decoded custom_order_data, or None for catalog orders."""
        if not self.custom_order_data:
            return None
        try:
            return json.loads(self.custom_order_data)
        except (ValueError, TypeError):
            return None

    @config_dict.setter
    def config_dict(self, value: dict):
        self.custom_order_data = json.dumps(value) if value is not None else None

    @property
    def is_custom(self) -> bool:
        return self.custom_order_data is not None

    def transition_to(self, new_status: str) -> str:
        """Move to new_status or raise OrderTransitionError. Returns the old status."""
        if new_status not in ORDER_STATUSES:
            raise OrderTransitionError(f'Unknown status "{new_status}".')
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise OrderTransitionError(
                f'Cannot change order from "{self.status}" to "{new_status}".'
            )
        old = self.status
        self.status = new_status
        return old

    # ── Serialisation ─────────────────────────────────────────────

    def _total(self) -> str:
        return str(Decimal(self.total_amount or 0).quantize(Decimal('0.01')))

    def to_summary_dict(self) -> dict:
        return {
            'id':              self.id,
            'square_order_id': self.square_order_id,
            'total_amount':    self._total(),
            'status':          self.status,
            'created_at':      self.created_at.isoformat(),
        }

    def to_dict(self) -> dict:
        data = self.to_summary_dict()
        data.update({
            'external_state':    self.external_state,
            'custom_order_data': self.config_dict,
            'admin_notes':       self.admin_notes,
            'updated_at':        self.updated_at.isoformat(),
        })
        return data

    def to_admin_dict(self) -> dict:
        data = self.to_dict()
        data.update({
            'user_id':   self.user_id,
            'email':     self.user.email if self.user else None,
            'user_name': self.user.name if self.user else None,
            'phone':     self.user.phone if self.user else None,
        })
        return data

    def __repr__(self):
        return f'<Order #{self.id} {self.status}>'
