from flask import jsonify, current_app

from ledshop.auth.decorators import admin_required
from ledshop.catalog import catalog, client, sync
from ledshop.catalog.client import CatalogError
from ledshop.categories import service as categories


def _catalog_failure(message: str, e: CatalogError):
    current_app.logger.error(f"{message}: {e}")
    return jsonify({'error': message, 'message': str(e)}), 500


@catalog.route('/test')
def connection_test():
    """Probe the POS API with a single catalog list call."""
    environment = current_app.config.get('SQUARE_ENVIRONMENT') or 'not set'
    try:
        response = client.square_request('GET', '/v2/catalog/list?types=ITEM')
    except CatalogError as e:
        current_app.logger.error(f"Square connection test failed: {e}")
        return jsonify({
            'success':     False,
            'message':     'Square API connection failed',
            'error':       str(e),
            'details':     e.details,
            'environment': environment,
        }), 500

    return jsonify({
        'success':          True,
        'message':          'Square API connection successful',
        'catalogItemCount': len(response.get('objects') or []),
        'tokenLength':      len(current_app.config.get('SQUARE_ACCESS_TOKEN') or ''),
        'environment':      environment,
        'locationId':       current_app.config.get('SQUARE_LOCATION_ID') or 'not set',
    })


@catalog.route('/products')
def products():
    """
    Storefront products: only those assigned to a category in the admin
    panel, with categoryIds rewritten to the database category ids.
    """
    db_ids = categories.db_category_ids_by_product()
    if not db_ids:
        return jsonify([])

    try:
        items = sync.list_catalog_items()
    except CatalogError as e:
        return _catalog_failure('Failed to fetch products', e)

    result = []
    for product in items:
        if product.id not in db_ids:
            continue
        data = product.to_dict()
        data['categoryIds'] = [str(cid) for cid in db_ids[product.id]]
        result.append(data)
    return jsonify(result)


@catalog.route('/products/<product_id>')
def product_detail(product_id):
    try:
        product = sync.get_catalog_item(product_id)
    except CatalogError as e:
        return _catalog_failure('Failed to fetch product', e)
    if product is None:
        return jsonify({'error': 'Product not found'}), 404
    return jsonify(product.to_dict())


@catalog.route('/categories')
def category_list():
    """Active database categories; POS categories when none are set up."""
    rows = categories.get_categories(active_only=True)
    if rows:
        return jsonify([{'id': str(c.id), 'name': c.display_name} for c in rows])

    try:
        pos_categories = sync.list_catalog_categories()
    except CatalogError as e:
        return _catalog_failure('Failed to fetch categories', e)
    return jsonify([c.to_dict() for c in pos_categories])


@catalog.route('/categories/<category_id>/products')
def category_products(category_id):
    """A numeric id naming a database category wins; anything else is a POS category id."""
    try:
        if category_id.isdigit():
            try:
                found = categories.get_products_by_category(int(category_id))
                return jsonify([p.to_dict() for p in found])
            except categories.CategoryNotFound:
                current_app.logger.info(f"No database category {category_id}; trying POS ids")

        found = sync.list_catalog_items_by_category(category_id)
    except CatalogError as e:
        return _catalog_failure('Failed to fetch products by category', e)

    current_app.logger.info(f"Found {len(found)} products for POS category {category_id}")
    return jsonify([p.to_dict() for p in found])


@catalog.route('/categories/diagnostic')
@admin_required
def category_diagnostic():
    """How well POS products are covered by POS categories."""
    try:
        pos_categories = sync.list_catalog_categories()
        items = sync.list_catalog_items()
    except CatalogError as e:
        return _catalog_failure('Failed to run diagnostic', e)

    with_categories = [p for p in items if p.category_ids]
    ids_in_products = []
    for product in items:
        for cid in product.category_ids:
            if cid not in ids_in_products:
                ids_in_products.append(cid)

    return jsonify({
        'squareCategories': {
            'total':      len(pos_categories),
            'categories': [c.to_dict() for c in pos_categories],
        },
        'products': {
            'total':             len(items),
            'withCategories':    len(with_categories),
            'withoutCategories': len(items) - len(with_categories),
        },
        'categoryIdsFromProducts': ids_in_products,
        'sampleProducts': [
            {'id': p.id, 'name': p.name, 'categoryIds': p.category_ids}
            for p in with_categories[:10]
        ],
        'summary': {
            'squareCategoryCount':         len(pos_categories),
            'uniqueCategoryIdsInProducts': len(ids_in_products),
            'productsWithCategories':      len(with_categories),
            'productsWithoutCategories':   len(items) - len(with_categories),
        },
    })
