"""Attendance check-in API endpoints."""
from flask import Blueprint, current_app, jsonify, request

from qrattend import limiter
from qrattend.services.checkin_service import CheckinService
from qrattend.utils.errors import ValidationError

attendance_bp = Blueprint('attendance', __name__)

def _checkin_limit() -> str:
    return current_app.config.get('CHECKIN_RATE_LIMIT', '30 per minute')

def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid attendance data")
    return data

@attendance_bp.route('', methods=['POST'])
@limiter.limit(_checkin_limit)
def check_in():
    """Record a student's check-in against a session id."""
    data = _json_body()
    
    session_id = data.get('sessionId')
    if not isinstance(session_id, str) or not session_id.strip():
        raise ValidationError("sessionId is required")
    
    record = CheckinService.check_in(
        session_id.strip(),
        data.get('studentId'),
        data.get('studentName'),
        student_email=data.get('studentEmail'),
        ip_address=request.remote_addr
    )
    return jsonify(record.to_dict()), 201

@attendance_bp.route('/scan', methods=['POST'])
@limiter.limit(_checkin_limit)
def check_in_from_scan():
    """Record a check-in from the text decoded out of a session QR code."""
    data = _json_body()
    
    qr_data = data.get('qrData')
    if not isinstance(qr_data, str):
        raise ValidationError("qrData is required")
    
    record = CheckinService.check_in_from_payload(
        qr_data,
        data.get('studentId'),
        data.get('studentName'),
        student_email=data.get('studentEmail'),
        ip_address=request.remote_addr
    )
    return jsonify(record.to_dict()), 201
