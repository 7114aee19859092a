"""Development configuration."""
import os

from .base import Config

class DevelopmentConfig(Config):
    """Development configuration class."""
    DEBUG = True
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///qr_attendance_dev.db'
    
    LOG_LEVEL = 'DEBUG'
