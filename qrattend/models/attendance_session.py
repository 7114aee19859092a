"""Lecturer-created attendance session identified by a public QR id."""
from datetime import datetime, timedelta
from typing import Any, Dict

from qrattend import db
from qrattend.models.base import BaseModel, default_now
from qrattend.utils.helpers import isoformat

class AttendanceSession(BaseModel):
    """Time-boxed attendance window shown to students as a QR code."""
    
    __tablename__ = 'attendance_sessions'
    
    session_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    course_name = db.Column(db.Text, nullable=False)
    title = db.Column(db.Text, nullable=False)
    session_type = db.Column(db.Text, nullable=False)
    location = db.Column(db.Text, nullable=True)
    start_time = db.Column(db.DateTime, nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=default_now, nullable=False)
    
    # Relationships
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')
    
    @property
    def expires_at(self) -> datetime:
        """End of the joinable window."""
        return self.start_time + timedelta(minutes=self.duration_minutes)
    
    def is_expired(self, now: datetime) -> bool:
        """Check if the time window has elapsed at ``now``."""
        return now > self.expires_at
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public JSON shape."""
        return {
            'id': self.id,
            'sessionId': self.session_id,
            'courseName': self.course_name,
            'sessionTitle': self.title,
            'sessionType': self.session_type,
            'location': self.location,
            'startTime': isoformat(self.start_time),
            'duration': self.duration_minutes,
            'isActive': self.is_active,
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at)
        }
    
    def __repr__(self):
        return f'<AttendanceSession {self.session_id}>'
