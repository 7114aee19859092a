"""Session registry: create, look up, list and end attendance sessions."""
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from qrattend import db
from qrattend.models.attendance_session import AttendanceSession
from qrattend.utils.errors import StorageFailure, ValidationError
from qrattend.utils.helpers import parse_timestamp, utcnow
from qrattend.utils.validators import Validator

SESSION_ID_MAX_LENGTH = 50

class SessionService:
    """Service for attendance session lifecycle."""
    
    @staticmethod
    def generate_session_id(course_name: str, now: datetime = None) -> str:
        """Build a public id such as ``CS101-1718000000000`` from the course name."""
        now = now or utcnow()
        prefix = re.sub(r'\s+', '', course_name).upper()
        epoch_ms = int((now - datetime(1970, 1, 1)).total_seconds() * 1000)
        return f"{prefix}-{epoch_ms}"
    
    @staticmethod
    def create_session(data: Dict[str, Any], now: datetime = None) -> AttendanceSession:
        """Create a new active session.
        
        ``data`` accepts the snake_case field names of the model; the public
        ``session_id`` is generated from the course name when omitted.
        
        Raises:
            ValidationError: missing or malformed fields, or a public id that
                is already taken.
            StorageFailure: the database could not be reached.
        """
        now = now or utcnow()
        data = data or {}
        
        course_name = Validator.require_text(data.get('course_name'), 'courseName')
        title = Validator.require_text(data.get('title'), 'sessionTitle')
        session_type = Validator.require_text(data.get('session_type'), 'sessionType')
        location = Validator.optional_text(data.get('location'), 'location')
        duration = Validator.positive_int(
            data.get('duration_minutes'), 'duration',
            maximum=current_app.config.get('MAX_SESSION_MINUTES')
        )
        
        start_time = parse_timestamp(data.get('start_time'))
        if start_time is None:
            raise ValidationError("startTime must be an ISO 8601 timestamp")
        try:
            start_time + timedelta(minutes=duration)
        except OverflowError:
            raise ValidationError("Session would end outside the supported date range")
        
        created_by = data.get('created_by')
        if isinstance(created_by, bool) or not isinstance(created_by, int):
            raise ValidationError("createdBy must be an integer")
        
        session_id = data.get('session_id')
        if session_id is None:
            session_id = SessionService.generate_session_id(course_name, now)
        session_id = Validator.require_text(session_id, 'sessionId', SESSION_ID_MAX_LENGTH)
        
        session = AttendanceSession(
            session_id=session_id,
            course_name=course_name,
            title=title,
            session_type=session_type,
            location=location,
            start_time=start_time,
            duration_minutes=duration,
            is_active=True,
            created_by=created_by,
            created_at=now
        )
        
        try:
            db.session.add(session)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ValidationError(f"Session id '{session_id}' is already in use")
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error('Error creating session %s: %s', session_id, e)
            raise StorageFailure()
        
        current_app.logger.info(
            'Session %s created for %s (%d minutes)', session.session_id, course_name, duration
        )
        return session
    
    @staticmethod
    def find_by_public_id(session_id: str) -> Optional[AttendanceSession]:
        """Get a session by its public id, or None."""
        try:
            return AttendanceSession.query.filter_by(session_id=session_id).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error('Error loading session %s: %s', session_id, e)
            raise StorageFailure()
    
    @staticmethod
    def list_recent(limit: int = None) -> List[AttendanceSession]:
        """Newest-created sessions first, at most ``limit`` of them."""
        default_size = current_app.config.get('DEFAULT_PAGE_SIZE', 10)
        max_size = current_app.config.get('MAX_PAGE_SIZE', 100)
        if not limit or limit <= 0:
            limit = default_size
        limit = min(limit, max_size)
        
        try:
            return AttendanceSession.query.order_by(
                AttendanceSession.created_at.desc(),
                AttendanceSession.id.desc()
            ).limit(limit).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error('Error listing recent sessions: %s', e)
            raise StorageFailure()
    
    @staticmethod
    def list_active() -> List[AttendanceSession]:
        """Sessions still flagged active, latest start first.
        
        Expiry is only detected on validation, so a session whose window has
        passed stays in this list until someone tries to join it.
        """
        try:
            return AttendanceSession.query.filter_by(is_active=True).order_by(
                AttendanceSession.start_time.desc(),
                AttendanceSession.id.desc()
            ).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error('Error listing active sessions: %s', e)
            raise StorageFailure()
    
    @staticmethod
    def terminate(session_id: str) -> Optional[AttendanceSession]:
        """End a session. Ending an already ended session returns it unchanged."""
        try:
            updated = AttendanceSession.query.filter_by(
                session_id=session_id,
                is_active=True
            ).update({'is_active': False}, synchronize_session=False)
            db.session.commit()
            
            session = AttendanceSession.query.filter_by(session_id=session_id).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error('Error ending session %s: %s', session_id, e)
            raise StorageFailure()
        
        if updated:
            current_app.logger.info('Session %s ended', session_id)
        return session
