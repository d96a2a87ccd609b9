from datetime import datetime
from ledshop import db


class Photo(db.Model):
    """A customer's installation photo. Each upload earns points."""
    __tablename__ = 'photos'

    id          = db.Column(db.Integer, primary_key=True)
    user_id     = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                            nullable=False, index=True)
    file_url    = db.Column(db.String(500), nullable=False)
    file_key    = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, nullable=True)
    approved    = db.Column(db.Boolean, nullable=False, default=True)
    created_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            'id':          self.id,
            'user_id':     self.user_id,
            'file_url':    self.file_url,
            'file_key':    self.file_key,
            'description': self.description,
            'approved':    self.approved,
            'created_at':  self.created_at.isoformat(),
        }

    def __repr__(self):
        return f'<Photo #{self.id} user={self.user_id}>'
