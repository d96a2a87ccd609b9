"""
ledshop/categories/service.py
-----------------------------
Category CRUD, catalog sync, and product ↔ category assignment.

Functions that write leave the commit to the caller, except the sync and
bulk operations which own their transaction.
"""
import logging
from typing import List, Optional

from sqlalchemy import func

from ledshop import db
from ledshop.catalog import sync
from ledshop.catalog.sync import CatalogProduct, normalize_id
from ledshop.categories.models import Category, ProductCategory

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'display_name', 'description', 'is_active', 'display_order')


class CategoryNotFound(LookupError):
    pass


class MappingNotFound(LookupError):
    pass


# ── Categories ────────────────────────────────────────────────────

def get_categories(active_only: bool = True) -> List[Category]:
    query = Category.query
    if active_only:
        query = query.filter(Category.is_active.is_(True))
    return query.order_by(Category.display_order.asc(), Category.name.asc()).all()


def get_category(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise CategoryNotFound('Category not found')
    return category


def get_categories_with_product_counts(active_only: bool = True) -> List[dict]:
    """Each category's dict plus product_count (distinct mapped products)."""
    query = (
        db.session.query(Category, func.count(func.distinct(ProductCategory.product_id)))
        .outerjoin(ProductCategory, ProductCategory.category_id == Category.id)
    )
    if active_only:
        query = query.filter(Category.is_active.is_(True))
    rows = (query.group_by(Category.id)
            .order_by(Category.display_order.asc(), Category.name.asc())
            .all())

    result = []
    for category, count in rows:
        data = category.to_dict()
        data['product_count'] = int(count or 0)
        result.append(data)
    return result


def create_category(name: str, display_name: str, description: str = None,
                    is_active: bool = True, display_order: int = 0,
                    square_category_id: str = None) -> Category:
    category = Category(
        square_category_id=square_category_id or None,
        name=name,
        display_name=display_name,
        description=description or None,
        is_active=is_active,
        display_order=display_order,
    )
    db.session.add(category)
    db.session.flush()
    return category


def update_category(category_id: int, changes: dict) -> Category:
    """Apply only the keys present in changes."""
    category = get_category(category_id)
    for field in EDITABLE_FIELDS:
        if field in changes:
            setattr(category, field, changes[field])
    db.session.flush()
    return category


def delete_category(category_id: int) -> None:
    """Deletes the category and, through the cascade, its product mappings."""
    db.session.delete(get_category(category_id))
    db.session.flush()


def sync_categories_from_square() -> dict:
    """
    Upsert every POS category by square_category_id.
    Existing rows get name and display_name overwritten; new rows start
    active with display_order 0. Returns {'created', 'updated'}.
    """
    created = updated = 0
    for pos_category in sync.list_catalog_categories():
        existing = Category.query.filter_by(square_category_id=pos_category.id).first()
        if existing:
            existing.name = pos_category.name
            existing.display_name = pos_category.name
            updated += 1
        else:
            db.session.add(Category(
                square_category_id=pos_category.id,
                name=pos_category.name,
                display_name=pos_category.name,
                is_active=True,
                display_order=0,
            ))
            created += 1
    db.session.commit()
    logger.info(f"Category sync: {created} created, {updated} updated")
    return {'created': created, 'updated': updated}


# ── Products in a category ────────────────────────────────────────

def _mapped_product_ids(category_id: int) -> set:
    rows = db.session.query(ProductCategory.product_id).filter_by(category_id=category_id).all()
    return {row.product_id for row in rows}


def db_category_ids_by_product() -> dict:
    """product_id → [category ids]; only products with a mapping appear."""
    db_ids = {}
    rows = (db.session.query(ProductCategory.product_id, ProductCategory.category_id)
            .order_by(ProductCategory.id))
    for row in rows:
        db_ids.setdefault(row.product_id, []).append(row.category_id)
    return db_ids


def get_products_by_category(category_id: int) -> List[CatalogProduct]:
    """
    Manually mapped products when the category has any mappings; otherwise
    products whose POS category matches the category's square_category_id.
    """
    category = get_category(category_id)
    mapped = _mapped_product_ids(category_id)
    if not mapped and not category.square_category_id:
        return []

    products = sync.get_cached_products()
    if mapped:
        return [p for p in products if p.id in mapped]

    wanted = normalize_id(category.square_category_id)
    return [
        p for p in products
        if any(normalize_id(cid) == wanted or cid == category.square_category_id
               for cid in p.category_ids)
    ]


# ── Assignments ───────────────────────────────────────────────────

def assign_product_to_category(product_id: str, category_id: int,
                               is_primary: bool = False) -> ProductCategory:
    """Create the mapping or update is_primary on the existing one. Caller commits."""
    get_category(category_id)
    mapping = ProductCategory.query.filter_by(product_id=product_id,
                                              category_id=category_id).first()
    if mapping:
        mapping.is_primary = is_primary
    else:
        mapping = ProductCategory(product_id=product_id, category_id=category_id,
                                  is_primary=is_primary)
        db.session.add(mapping)
    db.session.flush()
    return mapping


def remove_product_from_category(product_id: str, category_id: int) -> None:
    mapping = ProductCategory.query.filter_by(product_id=product_id,
                                              category_id=category_id).first()
    if mapping is None:
        raise MappingNotFound('Product-category mapping not found')
    db.session.delete(mapping)
    db.session.flush()


def bulk_assign_products_to_category(product_ids: List[str], category_id: int) -> dict:
    """Assign each product (non-primary); returns {'assigned', 'errors'}."""
    get_category(category_id)
    assigned = errors = 0
    for product_id in product_ids:
        if not isinstance(product_id, str) or not product_id.strip():
            logger.warning(f"Skipping invalid product id in bulk assign: {product_id!r}")
            errors += 1
            continue
        assign_product_to_category(product_id, category_id, is_primary=False)
        assigned += 1
    db.session.commit()
    return {'assigned': assigned, 'errors': errors}


def get_product_categories(product_id: str) -> List[Category]:
    """Categories of one product, primary first."""
    return (
        Category.query
        .join(ProductCategory, ProductCategory.category_id == Category.id)
        .filter(ProductCategory.product_id == product_id)
        .order_by(ProductCategory.is_primary.desc(), Category.display_order.asc())
        .all()
    )


def _pos_category_names() -> dict:
    """POS category id → name, keyed with and without '#' prefixes."""
    names = {}
    for cat in sync.list_catalog_categories():
        names[cat.id] = cat.name
        names[normalize_id(cat.id).strip()] = cat.name
        if not cat.id.startswith('#'):
            names[f'#{cat.id}'] = cat.name
    return names


def get_all_products_with_categories(products: Optional[List[CatalogProduct]] = None) -> List[dict]:
    """
    Every catalog product with its POS category names (categoryNames) and
    database category ids (dbCategoryIds).
    """
    if products is None:
        products = sync.list_catalog_items()
    names_by_id = _pos_category_names()
    db_ids = db_category_ids_by_product()

    result = []
    for product in products:
        category_names = []
        for cid in product.category_ids:
            plain = normalize_id(cid).strip()
            name = (names_by_id.get(cid) or names_by_id.get(plain)
                    or names_by_id.get(f'#{plain}'))
            if name and name not in category_names:
                category_names.append(name)

        data = product.to_dict()
        data['categoryNames'] = category_names
        data['dbCategoryIds'] = db_ids.get(product.id, [])
        result.append(data)
    return result
