from datetime import datetime
from ledshop import db


class Notification(db.Model):
    """In-app message for a user, e.g. an order status change."""
    __tablename__ = 'notifications'

    id             = db.Column(db.Integer, primary_key=True)
    user_id        = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                               nullable=False, index=True)
    type           = db.Column(db.String(50),  nullable=False)
    title          = db.Column(db.String(255), nullable=False)
    message        = db.Column(db.Text,        nullable=False)
    reference_id   = db.Column(db.Integer,     nullable=True)
    reference_type = db.Column(db.String(50),  nullable=True)
    is_read        = db.Column(db.Boolean, nullable=False, default=False)
    created_at     = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            'id':             self.id,
            'type':           self.type,
            'title':          self.title,
            'message':        self.message,
            'reference_id':   self.reference_id,
            'reference_type': self.reference_type,
            'is_read':        self.is_read,
            'created_at':     self.created_at.isoformat(),
        }

    def __repr__(self):
        return f'<Notification user={self.user_id} {self.type}>'
