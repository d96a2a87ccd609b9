from datetime import datetime
from passlib.context import CryptContext
from ledshop import db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class User(db.Model):
    """A storefront account. Admins are ordinary users with is_admin set."""
    __tablename__ = 'users'

    id                 = db.Column(db.Integer, primary_key=True)
    email              = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash      = db.Column(db.String(255), nullable=False)
    name               = db.Column(db.String(255), nullable=True)
    company_name       = db.Column(db.String(255), nullable=True)
    phone              = db.Column(db.String(50),  nullable=True)
    is_admin           = db.Column(db.Boolean, nullable=False, default=False)
    can_view_prices    = db.Column(db.Boolean, nullable=False, default=False)
    can_order_products = db.Column(db.Boolean, nullable=False, default=False)
    created_at         = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at         = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                                   onupdate=datetime.utcnow)

    # ── Relationships ─────────────────────────────────────────────
    points = db.relationship('UserPoints', backref='user', uselist=False,
                             lazy='select', cascade='all, delete-orphan')

    # ── Password helpers ──────────────────────────────────────────
    def set_password(self, plain_password: str) -> None:
        """Hash and store the password. Never stores plain text."""
        self.password_hash = pwd_context.hash(plain_password)

    def check_password(self, plain_password: str) -> bool:
        """Return True if the supplied password matches the stored hash."""
        return pwd_context.verify(plain_password, self.password_hash)

    # ── Serialisation ─────────────────────────────────────────────
    def to_public_dict(self) -> dict:
        """Fields returned to the account owner on login/register."""
        return {
            'id':           self.id,
            'email':        self.email,
            'name':         self.name,
            'company_name': self.company_name,
            'phone':        self.phone,
        }

    def __repr__(self) -> str:
        return f"<User {self.email!r} admin={self.is_admin}>"
