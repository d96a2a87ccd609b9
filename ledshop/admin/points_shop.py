"""
ledshop/admin/points_shop.py
----------------------------
Points shop inventory. Items are created and edited through multipart
forms so an image can travel with them. Deleting an item is permanent;
past redemptions keep their rows with item_id cleared.

A stored image never outlives a failed write: when the commit fails the
new file is removed, and a replaced image is removed once the new one is
committed.
"""
from flask import request, jsonify, current_app

from ledshop import db
from ledshop.admin import admin
from ledshop.admin.validators import validate_shop_item_form, parse_shop_item_form
from ledshop.auth.decorators import admin_required
from ledshop.points.models import PointsShopItem
from ledshop.storage import StorageError, is_image, upload_file, delete_file
from ledshop.utils.validation import invalid_input


def _store_image(file):
    """Returns ({'url', 'key'}, None) or (None, error response)."""
    if not is_image(file):
        return None, (jsonify({'error': 'Only image files are allowed'}), 400)
    try:
        return upload_file(file, 'points-shop'), None
    except StorageError as e:
        current_app.logger.error(f"Shop item image upload failed: {e}")
        return None, (jsonify({'error': 'Failed to upload image', 'details': str(e)}), 500)


@admin.route('/points-shop/items', methods=['GET'])
@admin_required
def shop_items():
    """Every item, inactive included, newest first."""
    rows = PointsShopItem.query.order_by(PointsShopItem.created_at.desc(),
                                         PointsShopItem.id.desc()).all()
    return jsonify({'items': [i.to_dict(admin=True) for i in rows]})


@admin.route('/points-shop/items', methods=['POST'])
@admin_required
def create_shop_item():
    form = request.form.to_dict()
    errors = validate_shop_item_form(form)
    if errors:
        return invalid_input(errors)

    file = request.files.get('image')
    if file is None or not file.filename:
        return jsonify({'error': 'Product image is required',
                        'hint': 'Please select an image file to upload'}), 400
    stored, failure = _store_image(file)
    if failure:
        return failure

    try:
        item = PointsShopItem(image_url=stored['url'], image_key=stored['key'],
                              **parse_shop_item_form(form))
        db.session.add(item)
        db.session.commit()
    except Exception:
        db.session.rollback()
        delete_file(stored['key'])
        current_app.logger.exception("Shop item save failed")
        raise

    current_app.logger.info(f"Shop item #{item.id} '{item.name}' created")
    return jsonify({'item': item.to_dict(admin=True)}), 201


@admin.route('/points-shop/items/<int:item_id>', methods=['PUT'])
@admin_required
def update_shop_item(item_id):
    form = request.form.to_dict()
    errors = validate_shop_item_form(form, partial=True)
    if errors:
        return invalid_input(errors)

    item = db.session.get(PointsShopItem, item_id)
    if item is None:
        return jsonify({'error': 'Item not found'}), 404

    changes = parse_shop_item_form(form, partial=True)
    file = request.files.get('image')
    if file is not None and file.filename:
        stored, failure = _store_image(file)
        if failure:
            return failure
        changes['image_url'] = stored['url']
        changes['image_key'] = stored['key']

    if not changes:
        return jsonify({'error': 'No fields to update'}), 400

    old_key = item.image_key
    try:
        for field, value in changes.items():
            setattr(item, field, value)
        db.session.commit()
    except Exception:
        db.session.rollback()
        if 'image_key' in changes:
            delete_file(changes['image_key'])
        current_app.logger.exception(f"Shop item #{item_id} update failed")
        raise

    if 'image_key' in changes and old_key:
        delete_file(old_key)
    return jsonify({'item': item.to_dict(admin=True)})


@admin.route('/points-shop/items/<int:item_id>', methods=['DELETE'])
@admin_required
def delete_shop_item(item_id):
    item = db.session.get(PointsShopItem, item_id)
    if item is None:
        return jsonify({'error': 'Item not found'}), 404

    image_key = item.image_key
    db.session.delete(item)
    db.session.commit()
    if image_key:
        delete_file(image_key)
    current_app.logger.info(f"Shop item #{item_id} permanently deleted")
    return jsonify({'success': True, 'message': 'Item permanently deleted'})
