"""Typed failures raised by the attendance services."""
from datetime import datetime
from typing import Any, Dict, Optional

from qrattend.utils.helpers import isoformat


class AttendanceError(Exception):
    """Base class for every failure the service layer reports."""

    status_code = 400
    code = 'error'

    def __init__(self, message: str = None, status_code: int = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            'error': True,
            'message': self.message,
            'status_code': self.status_code,
            'code': self.code
        }


class ValidationError(AttendanceError):
    """Invalid input data."""
    code = 'validation_error'


class NotFound(AttendanceError):
    """Session not found."""
    status_code = 404
    code = 'not_found'


class Inactive(AttendanceError):
    """Session is no longer active."""
    code = 'inactive'


class Expired(AttendanceError):
    """Session has expired."""
    code = 'expired'


class DuplicateCheckin(AttendanceError):
    """Already checked in."""
    status_code = 409
    code = 'duplicate_checkin'

    def __init__(self, checkin_time: Optional[datetime], message: str = None):
        super().__init__(message)
        self.checkin_time = checkin_time

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['checkinTime'] = isoformat(self.checkin_time)
        return data


class StorageFailure(AttendanceError):
    """Storage is temporarily unavailable, please retry."""
    status_code = 503
    code = 'storage_failure'
