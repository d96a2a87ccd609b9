from flask import request, jsonify, g, current_app

from ledshop import db
from ledshop.auth.decorators import login_required
from ledshop.photos import photos
from ledshop.photos.models import Photo
from ledshop.points.service import award_photo_points
from ledshop.storage import StorageError, is_image, upload_file, delete_file


@photos.route('/upload', methods=['POST'])
@login_required
def upload():
    """
    Store an image and credit the upload bonus.
    The photo row and the points are committed together; the stored file is
    removed again if that commit fails.
    """
    file = request.files.get('photo')
    if file is None or not file.filename:
        return jsonify({'error': 'No file uploaded'}), 400
    if not is_image(file):
        return jsonify({'error': 'Only image files are allowed'}), 400

    try:
        stored = upload_file(file, 'photos')
    except StorageError as e:
        current_app.logger.error(f"Photo upload failed for user {g.user_id}: {e}")
        return jsonify({'error': 'Failed to upload photo'}), 500

    try:
        photo = Photo(
            user_id=g.user_id,
            file_url=stored['url'],
            file_key=stored['key'],
            description=request.form.get('description') or None,
            approved=True,
        )
        db.session.add(photo)
        db.session.flush()
        awarded = award_photo_points(g.user_id, photo.id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        delete_file(stored['key'])
        current_app.logger.exception(f"Photo save failed for user {g.user_id}")
        raise

    current_app.logger.info(f"Photo #{photo.id} uploaded by user {g.user_id}")
    return jsonify({'photo': photo.to_dict(), 'pointsAwarded': awarded}), 201


@photos.route('/', methods=['GET'], strict_slashes=False)
@login_required
def my_photos():
    rows = (Photo.query
            .filter_by(user_id=g.user_id)
            .order_by(Photo.created_at.desc(), Photo.id.desc())
            .all())
    return jsonify([p.to_dict() for p in rows])
