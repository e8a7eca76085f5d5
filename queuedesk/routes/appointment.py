from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from queuedesk.services import appointment_service
from queuedesk.utils.decorators import get_current_owner
from queuedesk.utils.timeutils import parse_iso_datetime
from queuedesk.utils.validators import validate_patient_fields
from queuedesk.routes.user import _json_body, _body_required  # Reuse body parsing

appointment_bp = Blueprint('appointment', __name__, url_prefix='/api/v1/appointment')


def _booking_payload():
    """Returns (start_time, fields, None) or (None, None, error_response)"""
    data = _json_body()
    if data is None:
        return None, None, _body_required()

    if not data.get('startTime'):
        return None, None, (jsonify({
            'success': False,
            'error': 'Field "startTime" is required'
        }), 400)

    try:
        start_time = parse_iso_datetime(data['startTime'])
    except ValueError:
        return None, None, (jsonify({
            'success': False,
            'error': 'Invalid startTime. Use an ISO 8601 timestamp'
        }), 400)

    return start_time, validate_patient_fields(data), None


def _booking_response(appointment, patient):
    return jsonify({
        'success': True,
        'message': 'Appointment booked successfully',
        'data': {
            'appointment': appointment.to_dict(include_patient=False),
            'patient': patient.to_dict()
        }
    }), 201


@appointment_bp.route('/available-slots/<int:user_id>/<string:date>', methods=['GET'])
def available_slots(user_id, date):
    """
    Free 30-minute slots for a business on a local date.
    date: YYYY-MM-DD
    """
    slots = appointment_service.get_available_slots(user_id, date)
    return jsonify({'success': True, 'data': [s.to_dict() for s in slots]}), 200


@appointment_bp.route('/book/<int:user_id>', methods=['POST'])
def book(user_id):
    """
    Public self-booking
    Body: { "startTime", "name", "phoneNumber", "age" }
    """
    start_time, fields, error = _booking_payload()
    if error:
        return error

    appointment, patient = appointment_service.book_appointment(user_id, start_time, fields)
    return _booking_response(appointment, patient)


@appointment_bp.route('/add-booking', methods=['POST'])
@jwt_required()
def add_booking():
    """Business books a slot on a customer's behalf"""
    start_time, fields, error = _booking_payload()
    if error:
        return error

    user_id, _ = get_current_owner()
    appointment, patient = appointment_service.add_booking(user_id, start_time, fields)
    return _booking_response(appointment, patient)


@appointment_bp.route('/user-appointments', methods=['GET'])
@jwt_required()
def user_appointments():
    user_id, role = get_current_owner()
    appointments = appointment_service.get_user_appointments(user_id, role)
    return jsonify({'success': True, 'data': [a.to_dict() for a in appointments]}), 200


@appointment_bp.route('/today-bookings', methods=['GET'])
@jwt_required()
def today_bookings():
    """Scheduled appointments for the business's local today"""
    user_id, role = get_current_owner()
    appointments = appointment_service.get_today_bookings(user_id, role)
    return jsonify({'success': True, 'data': [a.to_dict() for a in appointments]}), 200


@appointment_bp.route('/cancel/<int:appointment_id>', methods=['PUT'])
@appointment_bp.route('/cancel-booking/<int:appointment_id>', methods=['PUT'])
@jwt_required()
def cancel_booking(appointment_id):
    """scheduled -> cancelled"""
    user_id, role = get_current_owner()
    appointment = appointment_service.cancel_appointment(appointment_id, user_id, role)
    return jsonify({
        'success': True,
        'message': 'Appointment cancelled successfully',
        'data': appointment.to_dict()
    }), 200


@appointment_bp.route('/move-to-waitlist/<int:appointment_id>', methods=['POST'])
@jwt_required()
def move_to_waitlist(appointment_id):
    """Customer arrived: appointment -> walk-in queue entry"""
    user_id, role = get_current_owner()
    patient, entry = appointment_service.move_to_waitlist(appointment_id, user_id, role)
    return jsonify({
        'success': True,
        'message': 'Patient added to waitlist',
        'data': {
            'patient': patient.to_dict(),
            'queueEntry': entry.to_dict(include_patient=False)
        }
    }), 200
