"""Validation utilities for the application."""
import re
from typing import Any, Dict, List

from qrattend.utils.errors import ValidationError

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

class Validator:
    """Validation helper class."""
    
    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        return bool(re.match(EMAIL_PATTERN, email))
    
    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        errors = []
        
        for field in required_fields:
            value = data.get(field) if data else None
            if value is None or (isinstance(value, str) and not value.strip()):
                errors.append(f"{field} is required")
        
        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }
    
    @staticmethod
    def require_text(value: Any, field: str, max_length: int = None) -> str:
        """Return the stripped text value or raise ValidationError."""
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field} is required")
        value = value.strip()
        if max_length and len(value) > max_length:
            raise ValidationError(f"{field} must be at most {max_length} characters")
        return value
    
    @staticmethod
    def optional_text(value: Any, field: str) -> Any:
        """Return the stripped text, None for blank input, or raise ValidationError."""
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        return value.strip() or None
    
    @staticmethod
    def positive_int(value: Any, field: str, maximum: int = None) -> int:
        """Return value as a positive integer, at most ``maximum``, or raise ValidationError."""
        if isinstance(value, bool):
            raise ValidationError(f"{field} must be a positive integer")
        if isinstance(value, str) and value.strip().isdigit():
            value = int(value.strip())
        if not isinstance(value, int) or value <= 0:
            raise ValidationError(f"{field} must be a positive integer")
        if maximum is not None and value > maximum:
            raise ValidationError(f"{field} must be at most {maximum}")
        return value
