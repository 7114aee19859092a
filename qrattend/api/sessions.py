"""Session API endpoints."""
from flask import Blueprint, jsonify, request

from qrattend.services.checkin_service import CheckinService
from qrattend.services.qr_service import QRService
from qrattend.services.session_service import SessionService
from qrattend.services.validity_service import ValidityService
from qrattend.utils.errors import NotFound, ValidationError
from qrattend.utils.helpers import isoformat
from qrattend.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

# Request keys accepted for each model field, first match wins.
SESSION_FIELDS = {
    'session_id': ('sessionId',),
    'course_name': ('courseName',),
    'title': ('sessionTitle', 'title'),
    'session_type': ('sessionType',),
    'location': ('location',),
    'start_time': ('startTime',),
    'duration_minutes': ('duration', 'durationMinutes'),
    'created_by': ('createdBy',),
}

def _session_data(payload: dict) -> dict:
    data = {}
    for field, keys in SESSION_FIELDS.items():
        for key in keys:
            if key in payload:
                data[field] = payload[key]
                break
    return data

def _get_session_or_404(session_id: str):
    session = SessionService.find_by_public_id(session_id)
    if session is None:
        raise NotFound()
    return session

@sessions_bp.route('', methods=['POST'])
def create_session():
    """Create a new attendance session."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid session data")
    
    data = _session_data(payload)
    check = Validator.validate_required_fields(
        data, ['course_name', 'title', 'session_type', 'start_time', 'duration_minutes', 'created_by']
    )
    if not check['is_valid']:
        raise ValidationError("; ".join(check['errors']))
    
    session = SessionService.create_session(data)
    return jsonify(session.to_dict()), 201

@sessions_bp.route('', methods=['GET'])
def recent_sessions():
    """Get recently created sessions."""
    limit = request.args.get('limit', type=int)
    sessions = SessionService.list_recent(limit)
    return jsonify([s.to_dict() for s in sessions])

@sessions_bp.route('/active', methods=['GET'])
def active_sessions():
    """Get sessions still flagged active."""
    sessions = SessionService.list_active()
    return jsonify([s.to_dict() for s in sessions])

@sessions_bp.route('/<session_id>', methods=['GET'])
def get_session(session_id):
    """Get a session by its public id."""
    session = _get_session_or_404(session_id)
    return jsonify(session.to_dict())

@sessions_bp.route('/<session_id>/end', methods=['PATCH'])
def end_session(session_id):
    """End a session."""
    session = SessionService.terminate(session_id)
    if session is None:
        raise NotFound()
    return jsonify(session.to_dict())

@sessions_bp.route('/<session_id>/validate', methods=['GET'])
def validate_session(session_id):
    """Validate a session for student check-in."""
    return jsonify(ValidityService.validate_for_checkin(session_id))

@sessions_bp.route('/<session_id>/attendance', methods=['GET'])
def session_attendance(session_id):
    """Get check-ins for a session, newest first."""
    records = CheckinService.list_for_session(session_id)
    return jsonify([r.to_dict() for r in records])

@sessions_bp.route('/<session_id>/qr', methods=['GET'])
def session_qr(session_id):
    """QR payload and PNG image for displaying a session."""
    session = _get_session_or_404(session_id)
    qr_data = QRService.build_payload(session.session_id)
    return jsonify({
        'sessionId': session.session_id,
        'qrData': qr_data,
        'qrImage': QRService.generate_qr_image(qr_data),
        'expiresAt': isoformat(session.expires_at),
        'isActive': session.is_active
    })
