"""
ledshop/utils/logging.py
───────────────────────
Configures structured logging for the API.
"""
import os
import logging
from logging.handlers import RotatingFileHandler
from flask import g, has_request_context, request


class RequestFormatter(logging.Formatter):
    """
    Custom formatter that injects request info (IP, path, user id when the
    bearer token has been resolved) into logs if context is available.
    """
    def format(self, record):
        if has_request_context():
            record.url = f'{request.method} {request.path}'
            record.remote_addr = request.remote_addr
            record.user_id = g.get('user_id')
        else:
            record.url = None
            record.remote_addr = None
            record.user_id = None
        return super().format(record)


def setup_logging(app):
    """
    Configure rotating file logging: logs/app.log
    Max size: 5MB
    Backup count: 5 files
    Format: timestamp | level | module | ip | user | request | message
    """
    # app.logger is shared between app instances; start clean each time
    for handler in list(app.logger.handlers):
        app.logger.removeHandler(handler)

    # 1. File Logger (skipped under test and on read-only filesystems)
    if not app.config.get('TESTING'):
        try:
            log_dir = os.path.join(app.root_path, '..', 'logs')
            os.makedirs(log_dir, exist_ok=True)

            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=5 * 1024 * 1024,
                backupCount=5
            )
            file_handler.setFormatter(RequestFormatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(remote_addr)s | '
                'user=%(user_id)s | %(url)s | %(message)s'
            ))
            file_handler.setLevel(logging.INFO)
            app.logger.addHandler(file_handler)
        except OSError:
            app.logger.warning("File logging disabled: logs directory is not writable")

    # 2. Stdout Logger (picked up by the platform log drain)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
    ))
    stream_handler.setLevel(logging.INFO)
    app.logger.addHandler(stream_handler)

    app.logger.setLevel(logging.INFO)

    # Service modules log through logging.getLogger(__name__) under "ledshop.*",
    # which propagates to the app logger above.
    app.logger.info("EFX LED Shop API startup")
