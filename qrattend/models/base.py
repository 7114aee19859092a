"""Base model class with common functionality."""
from datetime import datetime

from qrattend import db
from qrattend.utils.helpers import utcnow

class BaseModel(db.Model):
    """Base model class with common fields and methods."""
    
    __abstract__ = True
    
    id = db.Column(db.Integer, primary_key=True)
    
    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.id}>'


def default_now() -> datetime:
    return utcnow()
