from __future__ import annotations

import threading
from datetime import datetime, timedelta

import pytest

from classroom_attendance.attendance.factory import VerifierFactory
from classroom_attendance.attendance.model import TokenEvidence
from classroom_attendance.attendance.service import CheckInService
from classroom_attendance.core.enums import ErrorKind, VerificationMethod
from classroom_attendance.core.exceptions import CheckInError
from classroom_attendance.sessions.token_rotator import SessionTokenRotator

from conftest import InMemoryAttendance, InMemoryEnrollments, InMemorySessions, InMemoryTokens, make_session

NOW = datetime(2025, 3, 3, 9, 5)
ATTEMPTS = 8


def _race(service: CheckInService, token: str) -> tuple[list, list]:
    barrier = threading.Barrier(ATTEMPTS)
    successes, errors = [], []
    guard = threading.Lock()

    def attempt():
        barrier.wait()
        try:
            record = service.attempt_check_in(7, 1, VerificationMethod.TOKEN, TokenEvidence(token), now=NOW)
            with guard:
                successes.append(record)
        except CheckInError as e:
            with guard:
                errors.append(e)

    threads = [threading.Thread(target=attempt) for _ in range(ATTEMPTS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return successes, errors


def _service(attendance, window) -> tuple[CheckInService, str]:
    tokens = InMemoryTokens()
    sessions = InMemorySessions(tokens, [make_session(1)])
    token = SessionTokenRotator(tokens, interval=timedelta(seconds=20)).rotate(sessions.get_by_id(1), NOW)
    service = CheckInService(
        attendance,
        sessions,
        InMemoryEnrollments([(7, 10)]),
        window=window,
        verifiers=VerifierFactory.standard(tokens),
        clock=lambda: NOW,
    )
    return service, token.value


@pytest.mark.parametrize("trial", range(5))
def test_simultaneous_attempts_record_once(window, trial):
    # Storage without a unique key: only the service lock keeps this to one record
    attendance = InMemoryAttendance(unique=False, delay=0.01)
    service, token = _service(attendance, window)

    successes, errors = _race(service, token)

    assert len(successes) == 1
    assert len(errors) == ATTEMPTS - 1
    assert all(e.kind == ErrorKind.ALREADY_RECORDED for e in errors)
    assert len(attendance.all()) == 1
    assert attendance.create_calls == 1


def test_duplicate_from_storage_becomes_already_recorded(window):
    attendance = InMemoryAttendance()
    service, token = _service(attendance, window)
    # Another process wins the insert between our lookup and our write
    original_lookup = attendance.get_for_session_and_student
    attendance.get_for_session_and_student = lambda *_: None
    service.attempt_check_in(7, 1, VerificationMethod.TOKEN, TokenEvidence(token), now=NOW)

    with pytest.raises(CheckInError) as exc:
        service.attempt_check_in(7, 1, VerificationMethod.TOKEN, TokenEvidence(token), now=NOW)

    assert exc.value.kind == ErrorKind.ALREADY_RECORDED
    attendance.get_for_session_and_student = original_lookup
    assert len(attendance.all()) == 1
