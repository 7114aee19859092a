"""Attendance record model."""
from typing import Any, Dict

from qrattend import db
from qrattend.models.base import BaseModel, default_now
from qrattend.utils.helpers import isoformat

class AttendanceRecord(BaseModel):
    """A single student's check-in against a session."""
    
    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_ref', 'student_id', name='uq_attendance_session_student'),
    )
    
    session_ref = db.Column(db.Integer, db.ForeignKey('attendance_sessions.id'), nullable=False, index=True)
    student_id = db.Column(db.Text, nullable=False)
    student_name = db.Column(db.Text, nullable=False)
    student_email = db.Column(db.Text, nullable=True)
    checkin_time = db.Column(db.DateTime, default=default_now, nullable=False)
    ip_address = db.Column(db.Text, nullable=True)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public JSON shape."""
        return {
            'id': self.id,
            'sessionId': self.session_ref,
            'studentId': self.student_id,
            'studentName': self.student_name,
            'studentEmail': self.student_email,
            'checkinTime': isoformat(self.checkin_time),
            'ipAddress': self.ip_address
        }
    
    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}-{self.session_ref}>'
