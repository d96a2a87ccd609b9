"""
ledshop/catalog/sync.py
-----------------------
Read side of the point-of-sale catalog.

The catalog list endpoint returns a flat, cursor-paginated stream of
ITEM / ITEM_VARIATION / IMAGE / CATEGORY objects. This module merges them
into CatalogProduct records the storefront understands:

  ITEM            → id, name, description, categoryIds
  first variation → price (cents / 100)
  first image id  → imageUrl
  description     → attributes (keyword match: indoor/outdoor, 12v/24v)

The full product list is cached per process for CATALOG_CACHE_TTL seconds.
Any fetch error drops the cache entirely.
"""
import logging
import time
import urllib.parse
from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app

from ledshop.catalog import client

logger = logging.getLogger(__name__)

PRODUCT_TYPES = 'ITEM,ITEM_VARIATION,IMAGE'


@dataclass
class CatalogProduct:
    id:           str
    name:         str
    description:  Optional[str] = None
    image_url:    Optional[str] = None
    price:        Optional[float] = None
    category_ids: List[str] = field(default_factory=list)
    attributes:   dict = field(default_factory=lambda: {'environment': 'both'})

    def to_dict(self) -> dict:
        """JSON shape consumed by the storefront."""
        return {
            'id':          self.id,
            'name':        self.name,
            'description': self.description,
            'imageUrl':    self.image_url,
            'price':       self.price,
            'categoryIds': list(self.category_ids),
            'attributes':  dict(self.attributes),
        }


@dataclass
class CatalogCategory:
    id:   str
    name: str

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name}


# ── Cache ─────────────────────────────────────────────────────────

_products_cache = {'products': None, 'fetched_at': 0.0}


def clear_cache() -> None:
    _products_cache['products'] = None
    _products_cache['fetched_at'] = 0.0


def get_cached_products() -> List[CatalogProduct]:
    """Full product list, refetched when older than CATALOG_CACHE_TTL."""
    ttl = current_app.config.get('CATALOG_CACHE_TTL', 300)
    cached = _products_cache['products']
    if cached is not None and time.monotonic() - _products_cache['fetched_at'] < ttl:
        return cached
    return list_catalog_items()


# ── Parsing helpers ───────────────────────────────────────────────

def normalize_id(category_id: str) -> str:
    """Category ids are sometimes stored with one or more leading '#'."""
    return category_id.lstrip('#')


def extract_attributes(description: Optional[str]) -> dict:
    attributes = {'environment': 'both'}
    if not description:
        return attributes
    desc = description.lower()
    if 'indoor' in desc:
        attributes['environment'] = 'indoor'
    if 'outdoor' in desc:
        attributes['environment'] = 'outdoor'
    if '12v' in desc:
        attributes['voltage'] = '12V'
    if '24v' in desc:
        attributes['voltage'] = '24V'
    return attributes


def _first_variation_price(item_data: dict) -> Optional[float]:
    variations = item_data.get('variations') or []
    if not variations or not isinstance(variations, list):
        return None
    money = (variations[0].get('item_variation_data') or {}).get('price_money') or {}
    amount = money.get('amount')
    return int(amount) / 100 if amount else None


def _category_ids(item_data: dict) -> List[str]:
    """Accept the `categories` array (strings or {id}) or the older `category_id`."""
    categories = item_data.get('categories')
    if isinstance(categories, list):
        ids = []
        for cat in categories:
            if isinstance(cat, dict):
                cat = cat.get('id')
            if cat is not None and str(cat) not in ('', 'undefined', 'null'):
                ids.append(str(cat))
        return ids

    cat = item_data.get('category_id')
    if not cat:
        return []
    if isinstance(cat, dict):
        cat = cat.get('id')
    return [str(cat)] if cat else []


def build_product(obj: dict, image_urls: dict) -> Optional[CatalogProduct]:
    """Flatten one ITEM object; image_urls maps IMAGE id → url."""
    if obj.get('type') != 'ITEM' or not obj.get('item_data'):
        return None
    item_data = obj['item_data']
    image_ids = item_data.get('image_ids') or []
    description = item_data.get('description') or None

    return CatalogProduct(
        id=obj['id'],
        name=item_data.get('name') or 'Unnamed Product',
        description=description,
        image_url=(image_urls.get(image_ids[0]) or None) if image_ids else None,
        price=_first_variation_price(item_data),
        category_ids=_category_ids(item_data),
        attributes=extract_attributes(description),
    )


def _list_objects(types: str) -> List[dict]:
    """Walk every page of /v2/catalog/list for the given object types."""
    objects = []
    cursor = None
    while True:
        path = f'/v2/catalog/list?types={types}'
        if cursor:
            path += f'&cursor={urllib.parse.quote(cursor, safe="")}'
        response = client.square_request('GET', path)
        objects.extend(response.get('objects') or [])
        cursor = response.get('cursor')
        if not cursor:
            return objects


# ── Public API ────────────────────────────────────────────────────

def list_catalog_items() -> List[CatalogProduct]:
    """Fetch and flatten every catalog item. Refreshes the cache."""
    try:
        objects = _list_objects(PRODUCT_TYPES)
    except client.CatalogError:
        clear_cache()
        raise

    image_urls = {
        obj['id']: (obj['image_data'].get('url') or '')
        for obj in objects
        if obj.get('type') == 'IMAGE' and obj.get('image_data')
    }
    products = [p for p in (build_product(obj, image_urls) for obj in objects) if p]

    _products_cache['products'] = products
    _products_cache['fetched_at'] = time.monotonic()
    logger.info(f"Fetched {len(products)} catalog products")
    return products


def get_catalog_item(item_id: str) -> Optional[CatalogProduct]:
    """Single item through batch-retrieve; None when absent or not an ITEM."""
    response = client.square_request('POST', '/v2/catalog/batch-retrieve', {
        'object_ids': [item_id],
        'include_related_objects': True,
    })
    objects = response.get('objects') or []
    if not objects:
        return None

    image_urls = {
        obj['id']: (obj['image_data'].get('url') or '')
        for obj in response.get('related_objects') or []
        if obj.get('type') == 'IMAGE' and obj.get('image_data')
    }
    return build_product(objects[0], image_urls)


def list_catalog_categories() -> List[CatalogCategory]:
    objects = _list_objects('CATEGORY')
    return [
        CatalogCategory(id=obj['id'],
                        name=(obj['category_data'].get('name') or 'Unnamed Category'))
        for obj in objects
        if obj.get('type') == 'CATEGORY' and obj.get('category_data')
    ]


def list_catalog_items_by_category(category_id: str) -> List[CatalogProduct]:
    """Cached products whose POS category ids match, ignoring '#' prefixes."""
    try:
        products = get_cached_products()
    except client.CatalogError:
        logger.exception(f"Catalog fetch failed while filtering category {category_id}")
        raise

    wanted = normalize_id(category_id)
    matched = [
        p for p in products
        if any(normalize_id(cid) == wanted or cid == category_id for cid in p.category_ids)
    ]
    if not matched:
        with_categories = sum(1 for p in products if p.category_ids)
        logger.info(f"No products for POS category {category_id} (normalised {wanted}); "
                    f"{with_categories}/{len(products)} products carry categories")
    return matched
