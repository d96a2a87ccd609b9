"""
ledshop/storage.py
------------------
Upload storage. Only the local filesystem provider is supported: files are
written under UPLOAD_DIR and served back by the main blueprint at
/uploads/<key>.
"""
import logging
import os
import time

from flask import current_app, url_for
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ('local',)


class StorageError(Exception):
    """The upload could not be stored."""


def is_image(file_storage) -> bool:
    return (file_storage.mimetype or '').startswith('image/')


def build_key(folder: str, filename: str) -> str:
    """<folder>/<epoch-millis>-<sanitised name>"""
    safe = secure_filename(filename or '') or 'upload'
    return f'{folder}/{int(time.time() * 1000)}-{safe}'


def upload_file(file_storage, folder: str = 'photos') -> dict:
    """
    Persist a werkzeug FileStorage and return {'url', 'key'}.
    Raises StorageError for an unsupported provider or a failed write.
    """
    provider = current_app.config.get('STORAGE_PROVIDER', 'local')
    if provider not in SUPPORTED_PROVIDERS:
        raise StorageError(f'Unsupported storage provider: {provider}')

    key = build_key(folder, file_storage.filename)
    path = os.path.join(current_app.config['UPLOAD_DIR'], *key.split('/'))
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_storage.save(path)
    except OSError as e:
        logger.error(f"Failed to write upload {key}: {e}")
        raise StorageError('Failed to store file') from e

    url = url_for('main.uploaded_file', filename=key, _external=True)
    logger.info(f"Stored upload {key}")
    return {'url': url, 'key': key}


def delete_file(key: str) -> bool:
    """Remove a stored upload; False when it was already gone."""
    path = os.path.join(current_app.config['UPLOAD_DIR'], *key.split('/'))
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    return True
