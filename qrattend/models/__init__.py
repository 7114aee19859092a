"""Models package with all models."""
from .base import BaseModel
from .attendance_session import AttendanceSession
from .attendance import AttendanceRecord

__all__ = ['BaseModel', 'AttendanceSession', 'AttendanceRecord']
