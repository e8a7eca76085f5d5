"""
Health check endpoints for monitoring and load balancers
"""
from flask import Blueprint, jsonify
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from queuedesk.extensions import db
from queuedesk.models import User, Patient, QueueEntry, Appointment
from queuedesk.utils.timeutils import utcnow, isoformat_utc, business_offset

health_bp = Blueprint('health', __name__, url_prefix='/health')

REQUIRED_TABLES = tuple(m.__tablename__ for m in (User, Patient, QueueEntry, Appointment))


@health_bp.route('', methods=['GET'])
@health_bp.route('/ping', methods=['GET'])
def health_check():
    """Process is up; no database access"""
    return jsonify({
        'status': 'healthy',
        'service': 'queuedesk',
        'utcOffsetMinutes': int(business_offset().total_seconds() // 60),
        'timestamp': isoformat_utc(utcnow()),
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """Database reachable and schema created"""
    missing = []
    try:
        db.session.execute(db.text('SELECT 1'))
        existing = set(inspect(db.engine).get_table_names())
        missing = [name for name in REQUIRED_TABLES if name not in existing]
        db_status = 'connected' if not missing else 'schema_missing'
    except SQLAlchemyError as e:
        db.session.rollback()
        db_status = f'error: {e}'

    body = {
        'status': 'ready' if db_status == 'connected' else 'not_ready',
        'database': db_status,
        'timestamp': isoformat_utc(utcnow()),
    }
    if missing:
        body['missingTables'] = missing
    return jsonify(body), 200 if db_status == 'connected' else 503


@health_bp.route('/live', methods=['GET'])
def liveness_check():
    return jsonify({'status': 'alive', 'timestamp': isoformat_utc(utcnow())}), 200
