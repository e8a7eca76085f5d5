from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from queuedesk.services import queue_service
from queuedesk.utils.decorators import get_current_owner
from queuedesk.utils.validators import validate_patient_fields
from queuedesk.routes.user import _json_body, _body_required  # Reuse body parsing

queue_bp = Blueprint('queue', __name__, url_prefix='/api/v1/queue')


@queue_bp.route('/patient', methods=['POST'])
@jwt_required()
def add_patient():
    """
    Add a walk-in patient to the caller's queue
    Body: { "name", "phoneNumber", "age" }
    """
    data = _json_body()
    if data is None:
        return _body_required()

    fields = validate_patient_fields(data)
    user_id, _ = get_current_owner()
    entry = queue_service.add_patient(user_id, fields)

    return jsonify({
        'success': True,
        'message': 'Patient added to waitlist',
        'data': entry.to_dict()
    }), 201


@queue_bp.route('/waitlist', methods=['GET'])
@jwt_required()
def waitlist():
    """Waiting entries, oldest first. Admins see every business."""
    user_id, role = get_current_owner()
    entries = queue_service.get_waitlist(user_id, role)
    return jsonify({'success': True, 'data': [e.to_dict() for e in entries]}), 200


@queue_bp.route('/serving', methods=['GET'])
@jwt_required()
def serving():
    user_id, role = get_current_owner()
    entries = queue_service.get_serving(user_id, role)
    return jsonify({'success': True, 'data': [e.to_dict() for e in entries]}), 200


@queue_bp.route('/allpatient', methods=['GET'])
@jwt_required()
def all_patients():
    """Every queue entry regardless of status"""
    user_id, role = get_current_owner()
    entries = queue_service.get_all_patients(user_id, role)
    return jsonify({'success': True, 'data': [e.to_dict() for e in entries]}), 200


@queue_bp.route('/patient/<int:patient_id>', methods=['GET'])
@jwt_required()
def get_patient(patient_id):
    user_id, role = get_current_owner()
    patient = queue_service.get_patient(patient_id, user_id, role)
    return jsonify({'success': True, 'data': patient.to_dict()}), 200


@queue_bp.route('/patient/<int:patient_id>/serve', methods=['PUT'])
@jwt_required()
def serve_patient(patient_id):
    """waiting -> serving"""
    user_id, role = get_current_owner()
    entry = queue_service.serve_patient(patient_id, user_id, role)
    return jsonify({
        'success': True,
        'message': 'Patient moved to serving',
        'data': entry.to_dict()
    }), 200


@queue_bp.route('/patient/<int:patient_id>/complete', methods=['PUT'])
@jwt_required()
def complete_patient(patient_id):
    """serving -> completed"""
    user_id, role = get_current_owner()
    entry = queue_service.complete_patient(patient_id, user_id, role)
    return jsonify({
        'success': True,
        'message': 'Patient consultation completed',
        'data': entry.to_dict()
    }), 200


@queue_bp.route('/patient/<int:patient_id>/cancelled', methods=['PUT'])
@jwt_required()
def cancel_patient(patient_id):
    """waiting -> cancelled, by the business"""
    user_id, role = get_current_owner()
    patient = queue_service.cancel_patient(patient_id, user_id, role)
    return jsonify({
        'success': True,
        'message': 'Patient marked as canceled',
        'data': patient.to_dict()
    }), 200


@queue_bp.route('/customeradd/<int:user_id>', methods=['POST'])
def add_customer_patient(user_id):
    """
    Public self-registration into a business's queue
    Body: { "name", "phoneNumber", "age" }
    """
    data = _json_body()
    if data is None:
        return _body_required()

    fields = validate_patient_fields(data)
    entry = queue_service.add_customer_patient(user_id, fields)

    return jsonify({
        'success': True,
        'message': 'Patient added to waitlist',
        'patientId': entry.patient_id,
        'data': entry.to_dict(include_patient=False)
    }), 201


@queue_bp.route('/public-waitlist/<int:user_id>', methods=['GET'])
def public_waitlist(user_id):
    """Public view of a business's waitlist: names only"""
    entries = queue_service.get_public_waitlist(user_id)
    return jsonify({'success': True, 'data': [e.to_public_dict() for e in entries]}), 200


@queue_bp.route('/patientremove/<int:patient_id>/<int:user_id>', methods=['DELETE'])
def remove_patient(patient_id, user_id):
    """Public self-cancel; the patient record is flagged, never deleted"""
    patient = queue_service.remove_patient(patient_id, user_id)
    return jsonify({
        'success': True,
        'message': 'Patient marked as canceled',
        'data': patient.to_dict()
    }), 200
