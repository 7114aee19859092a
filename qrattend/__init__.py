"""QR Attendance Tracker - Application Factory."""
import logging
import os
from typing import Any, Dict

from flask import Flask, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions
db = SQLAlchemy()
limiter = Limiter(key_func=get_remote_address)

def create_app(config_name: str = None, config_overrides: Dict[str, Any] = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from qrattend.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'QR Attendance Tracker',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from qrattend.api.sessions import sessions_bp
    from qrattend.api.attendance import attendance_bp

    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from werkzeug.exceptions import HTTPException
    from qrattend.utils.errors import AttendanceError
    from qrattend.utils.helpers import handle_error

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        if e.code is None or e.code < 400:
            return e
        return handle_error(e, e.code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error('Unhandled error: %s', error)
        return handle_error('Internal server error', 500)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('QR Attendance Tracker startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from qrattend.models import AttendanceSession, AttendanceRecord  # noqa: F401

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('list-sessions')
    @click.option('--active', is_flag=True, help='Only sessions still flagged active')
    @click.option('--limit', default=10, show_default=True, help='Number of recent sessions')
    def list_sessions(active, limit):
        """List attendance sessions."""
        from qrattend.services.session_service import SessionService

        sessions = SessionService.list_active() if active else SessionService.list_recent(limit)
        if not sessions:
            click.echo('No sessions found.')
            return

        for session in sessions:
            state = 'active' if session.is_active else 'ended'
            click.echo(
                f'{session.session_id}\t{session.course_name}\t{session.title}\t'
                f'{session.start_time.isoformat()}\t{session.duration_minutes}m\t{state}'
            )
