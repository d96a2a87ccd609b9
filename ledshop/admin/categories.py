"""
ledshop/admin/categories.py
---------------------------
Category management and sync from the point-of-sale catalog.
"""
from flask import request, jsonify, current_app
from sqlalchemy.exc import IntegrityError

from ledshop import db
from ledshop.admin import admin
from ledshop.admin.validators import validate_category
from ledshop.auth.decorators import admin_required
from ledshop.catalog.client import CatalogError
from ledshop.categories import service
from ledshop.categories.service import CategoryNotFound
from ledshop.utils.validation import invalid_input, json_body


def _not_found():
    return jsonify({'error': 'Category not found'}), 404


@admin.route('/categories', methods=['GET'])
@admin_required
def list_categories():
    include_inactive = request.args.get('includeInactive') == 'true'
    return jsonify({
        'categories': service.get_categories_with_product_counts(active_only=not include_inactive),
    })


@admin.route('/categories/<int:category_id>', methods=['GET'])
@admin_required
def get_category(category_id):
    try:
        category = service.get_category(category_id)
    except CategoryNotFound:
        return _not_found()
    return jsonify({'category': category.to_dict()})


@admin.route('/categories', methods=['POST'])
@admin_required
def create_category():
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_category(data)
    if errors:
        return invalid_input(errors)

    try:
        category = service.create_category(
            name=data['name'].strip(),
            display_name=data['display_name'].strip(),
            description=data.get('description'),
            is_active=data.get('is_active', True),
            display_order=int(data.get('display_order') or 0),
            square_category_id=data.get('square_category_id'),
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'A category with that catalog id already exists'}), 400
    current_app.logger.info(f"Category #{category.id} '{category.display_name}' created")
    return jsonify({'category': category.to_dict()}), 201


@admin.route('/categories/<int:category_id>', methods=['PUT'])
@admin_required
def update_category(category_id):
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_category(data, partial=True)
    if errors:
        return invalid_input(errors)

    changes = {k: v for k, v in data.items() if k in service.EDITABLE_FIELDS}
    if 'display_order' in changes:
        changes['display_order'] = int(changes['display_order'] or 0)
    try:
        category = service.update_category(category_id, changes)
    except CategoryNotFound:
        return _not_found()
    db.session.commit()
    return jsonify({'category': category.to_dict()})


@admin.route('/categories/<int:category_id>', methods=['DELETE'])
@admin_required
def delete_category(category_id):
    try:
        service.delete_category(category_id)
    except CategoryNotFound:
        return _not_found()
    db.session.commit()
    current_app.logger.info(f"Category #{category_id} deleted")
    return jsonify({'message': 'Category deleted successfully'})


@admin.route('/categories/sync', methods=['POST'])
@admin_required
def sync_categories():
    try:
        result = service.sync_categories_from_square()
    except CatalogError as e:
        db.session.rollback()
        current_app.logger.error(f"Category sync failed: {e}")
        return jsonify({'error': 'Failed to sync categories from Square'}), 500
    return jsonify({'message': 'Categories synced successfully', **result})


@admin.route('/categories/<int:category_id>/products', methods=['GET'])
@admin_required
def category_products(category_id):
    try:
        products = service.get_products_by_category(category_id)
    except CategoryNotFound:
        return _not_found()
    except CatalogError as e:
        current_app.logger.error(f"Fetching products for category #{category_id} failed: {e}")
        return jsonify({'error': 'Failed to fetch category products'}), 500
    return jsonify({'products': [p.to_dict() for p in products]})
