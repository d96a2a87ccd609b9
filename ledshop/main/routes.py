"""
ledshop/main/routes.py
──────────────────────
API banner, health check, and locally stored uploads.
"""
from datetime import datetime

from flask import current_app, jsonify, send_from_directory
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ledshop import db
from ledshop.main import main

ENDPOINTS = {
    'health':      '/api/health',
    'auth':        '/api/auth',
    'user':        '/api/user',
    'orders':      '/api/orders',
    'square':      '/api/square',
    'drivers':     '/api/drivers',
    'photos':      '/api/photos',
    'points':      '/api/points',
    'pointsShop':  '/api/points-shop',
    'leaderboard': '/api/leaderboard',
    'admin':       '/api/admin',
}


@main.route('/')
def index():
    return jsonify({
        'message':   'EFX LED Shop API',
        'status':    'running',
        'endpoints': ENDPOINTS,
    })


@main.route('/api/health')
def health():
    """Health check for load balancers and monitoring."""
    status = 'ok'
    database = 'ok'
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        db.session.rollback()
        status = database = 'error'
        current_app.logger.error(f"Health check failed (DB): {e}")

    environment = 'testing' if current_app.testing else ('development' if current_app.debug else 'production')
    response = {
        'status':      status,
        'timestamp':   datetime.utcnow().isoformat(),
        'environment': environment,
        'details':     {'db': database},
    }
    return jsonify(response), 200 if status == 'ok' else 500


@main.route('/uploads/<path:filename>')
def uploaded_file(filename):
    """Files written by the local storage provider."""
    return send_from_directory(current_app.config['UPLOAD_DIR'], filename)
