"""Session validity checks with lazy, read-triggered expiry."""
from datetime import datetime
from typing import Any, Dict

from flask import current_app

from qrattend.models.attendance_session import AttendanceSession
from qrattend.services.session_service import SessionService
from qrattend.utils.errors import Expired, Inactive, NotFound
from qrattend.utils.helpers import isoformat, utcnow

class ValidityService:
    """Decides whether a session can currently accept check-ins.
    
    There is no background sweep: a session whose window has passed is ended
    the first time someone validates it.
    """
    
    @staticmethod
    def is_joinable(session: AttendanceSession, now: datetime = None) -> bool:
        """Active and not past ``start_time + duration_minutes``."""
        now = now or utcnow()
        return bool(session.is_active) and not session.is_expired(now)
    
    @staticmethod
    def snapshot(session: AttendanceSession) -> Dict[str, Any]:
        """Read-only public view of a session for students."""
        return {
            'sessionId': session.session_id,
            'courseName': session.course_name,
            'sessionTitle': session.title,
            'sessionType': session.session_type,
            'location': session.location,
            'startTime': isoformat(session.start_time),
            'duration': session.duration_minutes,
            'isActive': session.is_active
        }
    
    @staticmethod
    def load_for_checkin(session_id: str, now: datetime = None) -> AttendanceSession:
        """Return the joinable session or raise NotFound, Inactive or Expired.
        
        An expired session is ended as a side effect before Expired is raised.
        """
        now = now or utcnow()
        
        session = SessionService.find_by_public_id(session_id)
        if session is None:
            raise NotFound()
        
        if not session.is_active:
            raise Inactive()
        
        if session.is_expired(now):
            SessionService.terminate(session_id)
            current_app.logger.info(
                'Session %s expired at %s, ended on access', session_id, isoformat(session.expires_at)
            )
            raise Expired()
        
        return session
    
    @staticmethod
    def validate_for_checkin(session_id: str, now: datetime = None) -> Dict[str, Any]:
        """Validate a session for check-in and return its public snapshot."""
        session = ValidityService.load_for_checkin(session_id, now)
        return ValidityService.snapshot(session)
