"""Shared fixtures for the attendance tests."""
from datetime import datetime

import pytest

from qrattend import create_app, db
from qrattend.services.session_service import SessionService

START = datetime(2025, 3, 3, 9, 0, 0)

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def make_session(app):
    """Factory creating sessions that start at START unless told otherwise."""
    def _make(session_id='CS101-1000', **overrides):
        data = {
            'session_id': session_id,
            'course_name': 'CS101',
            'title': 'Intro',
            'session_type': 'Lecture',
            'location': 'Room 4',
            'start_time': START,
            'duration_minutes': 60,
            'created_by': 1,
        }
        data.update(overrides)
        start = data['start_time']
        return SessionService.create_session(data, now=start if isinstance(start, datetime) else START)
    return _make
