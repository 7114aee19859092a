"""Check-in coordinator: records at most one check-in per student per session."""
from datetime import datetime
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from qrattend import db
from qrattend.models.attendance import AttendanceRecord
from qrattend.services.qr_service import QRService
from qrattend.services.session_service import SessionService
from qrattend.services.validity_service import ValidityService
from qrattend.utils.errors import DuplicateCheckin, NotFound, StorageFailure, ValidationError
from qrattend.utils.helpers import utcnow
from qrattend.utils.validators import Validator

class CheckinService:
    """Service for student check-ins."""
    
    @staticmethod
    def _find_existing(session_ref: int, student_id: str) -> Optional[AttendanceRecord]:
        return AttendanceRecord.query.filter_by(
            session_ref=session_ref,
            student_id=student_id
        ).first()
    
    @staticmethod
    def check_in(
        session_id: str,
        student_id: str,
        student_name: str,
        student_email: str = None,
        ip_address: str = None,
        now: datetime = None
    ) -> AttendanceRecord:
        """Record a student's attendance for a session.
        
        Raises:
            ValidationError: missing student details.
            NotFound, Inactive, Expired: the session cannot be joined.
            DuplicateCheckin: the student already checked in; carries the
                original check-in time.
            StorageFailure: the database could not be reached.
        """
        now = now or utcnow()
        
        student_id = Validator.require_text(student_id, 'studentId')
        student_name = Validator.require_text(student_name, 'studentName')
        student_email = Validator.optional_text(student_email, 'studentEmail')
        if student_email and not Validator.validate_email(student_email):
            raise ValidationError("studentEmail is not a valid email address")
        
        session = ValidityService.load_for_checkin(session_id, now)
        session_ref = session.id
        
        try:
            existing = CheckinService._find_existing(session_ref, student_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error('Error looking up check-in for %s: %s', session_id, e)
            raise StorageFailure()
        
        if existing is not None:
            current_app.logger.info('Duplicate check-in by %s for session %s', student_id, session_id)
            raise DuplicateCheckin(existing.checkin_time)
        
        record = AttendanceRecord(
            session_ref=session_ref,
            student_id=student_id,
            student_name=student_name,
            student_email=student_email,
            checkin_time=now,
            ip_address=ip_address
        )
        
        # The unique (session_ref, student_id) constraint settles concurrent inserts.
        try:
            db.session.add(record)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            winner = CheckinService._find_existing(session_ref, student_id)
            current_app.logger.info(
                'Concurrent duplicate check-in by %s for session %s', student_id, session_id
            )
            raise DuplicateCheckin(winner.checkin_time if winner else None)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error('Error recording check-in for %s: %s', session_id, e)
            raise StorageFailure()
        
        current_app.logger.info('Student %s checked in to session %s', student_id, session_id)
        return record
    
    @staticmethod
    def check_in_from_payload(qr_data: str, student_id: str, student_name: str, **kwargs) -> AttendanceRecord:
        """Check in using the text decoded from a session QR code."""
        session_id = QRService.parse_payload(qr_data)
        return CheckinService.check_in(session_id, student_id, student_name, **kwargs)
    
    @staticmethod
    def list_for_session(session_id: str) -> List[AttendanceRecord]:
        """Check-ins for a session, most recent first. Never ends the session."""
        session = SessionService.find_by_public_id(session_id)
        if session is None:
            raise NotFound()
        
        try:
            return AttendanceRecord.query.filter_by(session_ref=session.id).order_by(
                AttendanceRecord.checkin_time.desc(),
                AttendanceRecord.id.desc()
            ).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error('Error listing attendance for %s: %s', session_id, e)
            raise StorageFailure()
