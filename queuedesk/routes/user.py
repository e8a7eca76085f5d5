from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from queuedesk.services import user_service, queue_service
from queuedesk.utils.decorators import require_role, get_current_owner
from queuedesk.utils.validators import validate_signup, validate_login

user_bp = Blueprint('user', __name__, url_prefix='/api/v1/user')


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data


def _body_required():
    return jsonify({
        'success': False,
        'error': 'Request body must be JSON'
    }), 400


@user_bp.route('/signup', methods=['POST'])
def signup():
    """Register a business account and return a bearer token"""
    data = _json_body()
    if data is None:
        return _body_required()

    email, password, business_name = validate_signup(data)
    result = user_service.signup(email, password, business_name)

    return jsonify({'success': True, **result}), 201


@user_bp.route('/login', methods=['POST'])
def login():
    """Login endpoint - authenticates the business and returns a JWT"""
    data = _json_body()
    if data is None:
        return _body_required()

    email, password = validate_login(data)
    result = user_service.login(email, password)

    return jsonify({'success': True, **result}), 200


@user_bp.route('/profile', methods=['GET'])
@jwt_required()
def get_profile():
    """Current account, without the password hash"""
    user_id, _ = get_current_owner()
    user = user_service.get_profile(user_id)
    return jsonify({'success': True, 'data': user.to_dict()}), 200


@user_bp.route('/all', methods=['GET'])
@jwt_required()
@require_role('admin')
def list_users():
    """
    All accounts.
    Access: admin
    """
    users = user_service.get_all_users()
    return jsonify({'success': True, 'data': [u.to_dict() for u in users]}), 200


@user_bp.route('/role/<int:user_id>', methods=['PUT'])
@jwt_required()
@require_role('admin')
def change_role(user_id):
    """
    Change an account's role.
    Access: admin
    Body: { "role": "admin" | "user" }
    """
    data = _json_body()
    if data is None:
        return _body_required()

    user = user_service.change_user_role(user_id, data.get('role'))
    return jsonify({
        'success': True,
        'data': user.to_dict(),
        'message': f'Role updated to {user.role}'
    }), 200


@user_bp.route('/queue-status/<int:user_id>', methods=['GET'])
def queue_status(user_id):
    """Public: how many customers are waiting and being served"""
    return jsonify({'success': True, **queue_service.get_queue_status(user_id)}), 200


@user_bp.route('/businessName/<int:user_id>', methods=['GET'])
def business_name(user_id):
    return jsonify({'success': True, **user_service.get_business_name(user_id)}), 200


@user_bp.route('/get-user-by-business/<string:slug>', methods=['GET'])
def user_by_business(slug):
    """Public lookup used by the booking page: /<businessNameForUrl>"""
    user = user_service.get_user_by_business(slug)
    return jsonify({'success': True, 'data': user.to_dict()}), 200


@user_bp.route('/patient-stats', methods=['GET'])
@jwt_required()
def patient_stats():
    """Totals for the dashboard; resets the daily count after midnight"""
    user_id, _ = get_current_owner()
    return jsonify({'success': True, **user_service.get_patient_stats(user_id)}), 200


@user_bp.route('/business-hours', methods=['PUT'])
@jwt_required()
def update_business_hours():
    """
    Update opening and closing time.
    Body: { "startHour", "startMinute", "endHour", "endMinute" }
    """
    data = _json_body()
    if data is None:
        return _body_required()

    user_id, _ = get_current_owner()
    user = user_service.update_business_hours(
        user_id,
        data.get('startHour'),
        data.get('startMinute'),
        data.get('endHour'),
        data.get('endMinute'),
    )
    return jsonify({
        'success': True,
        'message': 'Business hours updated successfully',
        'businessHours': user.business_hours_dict()
    }), 200


@user_bp.route('/update-business-hours', methods=['PUT'])
@jwt_required()
def replace_business_hours():
    """
    Replace the whole business hours object, weekend flags included.
    Body: { "businessHours": { "startHour", "startMinute", "endHour", "endMinute",
                               "sundayOpen", "saturdayOpen" } }
    """
    data = _json_body()
    if data is None:
        return _body_required()

    hours = data.get('businessHours')
    if not isinstance(hours, dict):
        return jsonify({
            'success': False,
            'error': 'Field "businessHours" is required'
        }), 400

    user_id, _ = get_current_owner()
    user = user_service.update_business_hours(
        user_id,
        hours.get('startHour'),
        hours.get('startMinute'),
        hours.get('endHour'),
        hours.get('endMinute'),
        sunday_open=hours.get('sundayOpen', False),
        saturday_open=hours.get('saturdayOpen', False),
    )
    return jsonify({
        'success': True,
        'message': 'Business hours updated successfully',
        'data': user.to_dict()
    }), 200
