"""Testing configuration."""
from .base import Config

class TestingConfig(Config):
    """Testing configuration class."""
    
    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    
    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    
    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False
    
    # Logging
    LOG_LEVEL = 'WARNING'
