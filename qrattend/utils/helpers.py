"""Helper functions for the application."""
from datetime import datetime, timezone
from typing import Any, Optional

from flask import jsonify

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    message = getattr(error, 'description', None) or str(error)
    return jsonify({
        'error': True,
        'message': message,
        'status_code': status_code
    }), status_code

def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 string (or datetime) into a naive UTC datetime.

    Returns None when the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed

def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Serialize a stored naive UTC datetime as ISO 8601 with a Z suffix."""
    if value is None:
        return None
    return value.isoformat(timespec='milliseconds') + 'Z'
