"""Base configuration shared by every environment."""
import os

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    
    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]
    
    # Rate Limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "1000 per hour"
    CHECKIN_RATE_LIMIT = "30 per minute"
    
    # QR image rendering
    QR_BOX_SIZE = 10
    QR_BORDER = 2
    QR_FILL_COLOR = "#1976D2"
    QR_BACK_COLOR = "#FFFFFF"
    
    # Sessions
    MAX_SESSION_MINUTES = 24 * 60
    
    # Pagination
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100
    
    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
