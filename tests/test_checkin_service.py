"""Tests for the check-in coordinator."""
import threading
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query

from qrattend import create_app, db
from qrattend.models import AttendanceRecord
from qrattend.services.checkin_service import CheckinService
from qrattend.services.qr_service import QRService
from qrattend.services.session_service import SessionService
from qrattend.utils.errors import (
    DuplicateCheckin, Expired, Inactive, NotFound, StorageFailure, ValidationError
)
from qrattend.utils.helpers import utcnow
from tests.conftest import START

def test_lecture_scenario(make_session):
    """Check in, duplicate, then expire the CS101 lecture."""
    make_session('CS101-1000')
    
    record = CheckinService.check_in('CS101-1000', 'S1', 'Ada', now=START + timedelta(minutes=10))
    assert record.student_id == 'S1'
    assert record.checkin_time == START + timedelta(minutes=10)
    
    with pytest.raises(DuplicateCheckin) as exc:
        CheckinService.check_in('CS101-1000', 'S1', 'Ada', now=START + timedelta(minutes=20))
    assert exc.value.checkin_time == START + timedelta(minutes=10)
    assert exc.value.to_dict()['checkinTime'] == '2025-03-03T09:10:00.000Z'
    
    with pytest.raises(Expired):
        CheckinService.check_in('CS101-1000', 'S1', 'Ada', now=START + timedelta(minutes=90))
    
    assert SessionService.find_by_public_id('CS101-1000').is_active is False
    assert AttendanceRecord.query.count() == 1

def test_same_student_may_join_different_sessions(make_session):
    make_session('A-1')
    make_session('B-1')
    
    CheckinService.check_in('A-1', 'S1', 'Ada', now=START)
    CheckinService.check_in('B-1', 'S1', 'Ada', now=START)
    
    assert AttendanceRecord.query.count() == 2

def test_check_in_stores_optional_details(make_session):
    make_session()
    
    record = CheckinService.check_in(
        'CS101-1000', ' S2 ', 'Grace Hopper',
        student_email='grace@example.edu',
        ip_address='10.0.0.7',
        now=START
    )
    assert record.student_id == 'S2'
    assert record.student_email == 'grace@example.edu'
    assert record.ip_address == '10.0.0.7'

@pytest.mark.parametrize('student_id,student_name,email', [
    ('', 'Ada', None),
    ('S1', '  ', None),
    (None, 'Ada', None),
    ('S1', 'Ada', 'not-an-email'),
])
def test_check_in_rejects_bad_student_details(make_session, student_id, student_name, email):
    make_session()
    
    with pytest.raises(ValidationError):
        CheckinService.check_in('CS101-1000', student_id, student_name, student_email=email, now=START)

def test_check_in_unknown_session(app):
    with pytest.raises(NotFound):
        CheckinService.check_in('NOPE-1', 'S1', 'Ada', now=START)

def test_check_in_ended_session(make_session):
    make_session()
    SessionService.terminate('CS101-1000')
    
    with pytest.raises(Inactive):
        CheckinService.check_in('CS101-1000', 'S1', 'Ada', now=START)

def test_constraint_catches_duplicate_missed_by_lookup(make_session, monkeypatch):
    """If two requests both pass the lookup, the unique constraint decides."""
    make_session()
    CheckinService.check_in('CS101-1000', 'S1', 'Ada', now=START + timedelta(minutes=1))
    
    real_lookup = CheckinService._find_existing
    answers = [None]
    
    def racing_lookup(session_ref, student_id):
        if answers:
            return answers.pop()
        return real_lookup(session_ref, student_id)
    
    monkeypatch.setattr(CheckinService, '_find_existing', staticmethod(racing_lookup))
    
    with pytest.raises(DuplicateCheckin) as exc:
        CheckinService.check_in('CS101-1000', 'S1', 'Ada', now=START + timedelta(minutes=2))
    
    assert exc.value.checkin_time == START + timedelta(minutes=1)
    assert AttendanceRecord.query.count() == 1

def test_concurrent_check_ins_record_once(tmp_path):
    """Many simultaneous check-ins for the same student leave one record."""
    app = create_app('testing', {
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'concurrent.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30}},
    })
    now = utcnow()
    with app.app_context():
        db.create_all()
        SessionService.create_session({
            'session_id': 'RACE-1',
            'course_name': 'CS101',
            'title': 'Race',
            'session_type': 'Lecture',
            'start_time': now,
            'duration_minutes': 60,
            'created_by': 1,
        }, now=now)
    
    workers = 8
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()
    
    def attempt():
        with app.app_context():
            barrier.wait()
            try:
                CheckinService.check_in('RACE-1', 'S1', 'Ada', now=now)
                result = 'ok'
            except DuplicateCheckin:
                result = 'duplicate'
            finally:
                db.session.remove()
            with lock:
                outcomes.append(result)
    
    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    
    assert outcomes.count('ok') == 1
    assert outcomes.count('duplicate') == workers - 1
    
    with app.app_context():
        assert AttendanceRecord.query.count() == 1
        db.drop_all()
        db.engine.dispose()

def test_list_for_session_newest_first(make_session):
    make_session()
    for minutes, student in [(5, 'S1'), (15, 'S2'), (10, 'S3')]:
        CheckinService.check_in('CS101-1000', student, student, now=START + timedelta(minutes=minutes))
    
    records = CheckinService.list_for_session('CS101-1000')
    assert [r.student_id for r in records] == ['S2', 'S3', 'S1']

def test_list_for_ended_session_without_check_ins_is_empty(make_session):
    make_session()
    SessionService.terminate('CS101-1000')
    
    assert CheckinService.list_for_session('CS101-1000') == []

def test_list_for_session_does_not_expire_it(make_session):
    make_session(start_time=START - timedelta(days=1))
    
    CheckinService.list_for_session('CS101-1000')
    assert SessionService.find_by_public_id('CS101-1000').is_active is True

def test_list_for_unknown_session(app):
    with pytest.raises(NotFound):
        CheckinService.list_for_session('NOPE-1')

def test_check_in_from_payload(make_session):
    make_session()
    payload = QRService.build_payload('CS101-1000', now=START)
    
    record = CheckinService.check_in_from_payload(payload, 'S9', 'Linus', now=START + timedelta(minutes=3))
    assert record.student_id == 'S9'
    assert record.session.session_id == 'CS101-1000'

def test_check_in_storage_failure_leaves_no_record(make_session, monkeypatch):
    make_session()
    
    def failing_commit():
        raise OperationalError('INSERT INTO attendance_records', {}, Exception('disk I/O error'))
    
    monkeypatch.setattr(db.session, 'commit', failing_commit)
    with pytest.raises(StorageFailure) as exc:
        CheckinService.check_in('CS101-1000', 'S1', 'Ada', now=START)
    monkeypatch.undo()
    
    assert exc.value.status_code == 503
    assert exc.value.to_dict()['code'] == 'storage_failure'
    assert AttendanceRecord.query.count() == 0
    
    # Safe to retry once storage is back.
    record = CheckinService.check_in('CS101-1000', 'S1', 'Ada', now=START + timedelta(minutes=1))
    assert record.checkin_time == START + timedelta(minutes=1)

def test_listing_storage_failure(make_session, monkeypatch):
    make_session()
    
    def failing_all(self):
        raise OperationalError('SELECT', {}, Exception('database is locked'))
    
    monkeypatch.setattr(Query, 'all', failing_all)
    with pytest.raises(StorageFailure):
        CheckinService.list_for_session('CS101-1000')
