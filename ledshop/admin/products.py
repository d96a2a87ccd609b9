"""
ledshop/admin/products.py
-------------------------
Catalog products and their storefront category assignments.
"""
from flask import jsonify, current_app

from ledshop import db
from ledshop.admin import admin
from ledshop.admin.validators import validate_assignment, validate_bulk_assignment
from ledshop.auth.decorators import admin_required
from ledshop.catalog import sync
from ledshop.catalog.client import CatalogError
from ledshop.categories import service
from ledshop.categories.service import CategoryNotFound, MappingNotFound
from ledshop.utils.validation import invalid_input, json_body


@admin.route('/products', methods=['GET'])
@admin_required
def list_products():
    try:
        products = service.get_all_products_with_categories()
    except CatalogError as e:
        current_app.logger.error(f"Admin product list failed: {e}")
        return jsonify({'error': 'Failed to fetch products'}), 500
    return jsonify({'products': products})


@admin.route('/products/<product_id>', methods=['GET'])
@admin_required
def get_product(product_id):
    try:
        product = next((p for p in sync.list_catalog_items() if p.id == product_id), None)
    except CatalogError as e:
        current_app.logger.error(f"Admin product fetch failed: {e}")
        return jsonify({'error': 'Failed to fetch product'}), 500
    if product is None:
        return jsonify({'error': 'Product not found'}), 404

    categories = service.get_product_categories(product_id)
    data = product.to_dict()
    data['categoryIds'] = [c.id for c in categories]
    return jsonify({'product': data, 'categories': [c.to_dict() for c in categories]})


@admin.route('/products/<product_id>/categories', methods=['POST'])
@admin_required
def assign_category(product_id):
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_assignment(data)
    if errors:
        return invalid_input(errors)

    try:
        service.assign_product_to_category(product_id, data['categoryId'],
                                           data.get('isPrimary', False))
    except CategoryNotFound:
        return jsonify({'error': 'Category not found'}), 404
    db.session.commit()
    return jsonify({'message': 'Product assigned to category successfully'})


@admin.route('/products/<product_id>/categories/<int:category_id>', methods=['DELETE'])
@admin_required
def remove_category(product_id, category_id):
    try:
        service.remove_product_from_category(product_id, category_id)
    except MappingNotFound as e:
        return jsonify({'error': str(e)}), 404
    db.session.commit()
    return jsonify({'message': 'Product removed from category successfully'})


@admin.route('/products/bulk-assign', methods=['POST'])
@admin_required
def bulk_assign():
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_bulk_assignment(data)
    if errors:
        return invalid_input(errors)

    try:
        result = service.bulk_assign_products_to_category(data['productIds'], data['categoryId'])
    except CategoryNotFound:
        return jsonify({'error': 'Category not found'}), 404
    current_app.logger.info(
        f"Bulk assigned {result['assigned']} products to category #{data['categoryId']}"
    )
    return jsonify({'message': 'Bulk assignment completed', **result})
