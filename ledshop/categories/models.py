"""
ledshop/categories/models.py
----------------------------
Storefront categories and their product assignments.

Products live in the point-of-sale catalog, so ProductCategory keys them by
the external product id. A category is either synced from the catalog
(square_category_id set) or created by an admin (square_category_id NULL).
"""
from datetime import datetime
from ledshop import db


class Category(db.Model):
    __tablename__ = 'categories'

    id                 = db.Column(db.Integer, primary_key=True)
    square_category_id = db.Column(db.String(255), unique=True, nullable=True)
    name               = db.Column(db.String(255), nullable=False)
    display_name       = db.Column(db.String(255), nullable=False)
    description        = db.Column(db.Text, nullable=True)
    is_active          = db.Column(db.Boolean, nullable=False, default=True)
    display_order      = db.Column(db.Integer, nullable=False, default=0)
    created_at         = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at         = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                                   onupdate=datetime.utcnow)

    # Deleting a category deletes its product mappings
    products = db.relationship('ProductCategory', backref='category', lazy='dynamic',
                               cascade='all, delete-orphan')

    def to_dict(self) -> dict:
        return {
            'id':                 self.id,
            'square_category_id': self.square_category_id,
            'name':               self.name,
            'display_name':       self.display_name,
            'description':        self.description,
            'is_active':          self.is_active,
            'display_order':      self.display_order,
            'created_at':         self.created_at.isoformat(),
            'updated_at':         self.updated_at.isoformat(),
        }

    def __repr__(self):
        return f'<Category {self.display_name!r}>'


class ProductCategory(db.Model):
    __tablename__ = 'product_categories'

    id          = db.Column(db.Integer, primary_key=True)
    product_id  = db.Column(db.String(255), nullable=False, index=True)   # external catalog id
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='CASCADE'),
                            nullable=False, index=True)
    is_primary  = db.Column(db.Boolean, nullable=False, default=False)
    created_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('product_id', 'category_id', name='uq_product_category'),
    )

    def __repr__(self):
        return f'<ProductCategory {self.product_id} → {self.category_id}>'
