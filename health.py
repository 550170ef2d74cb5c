from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app_models import db

health_bp = Blueprint('health', __name__)


@health_bp.route('/health')
def health_check():
    """Liveness plus a round trip to the record store"""
    try:
        db.session.execute(text('SELECT 1'))
        storage = 'ok'
    except SQLAlchemyError:
        db.session.rollback()
        storage = 'unavailable'
    status = 200 if storage == 'ok' else 503
    return jsonify({
        'status': 'ok' if status == 200 else 'degraded',
        'storage': storage,
        'version': '1.0.0'
    }), status
