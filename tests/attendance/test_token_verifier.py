from datetime import datetime, timedelta

import pytest

from classroom_attendance.attendance.model import TokenEvidence
from classroom_attendance.attendance.strategies.token_strategy import TokenVerifier
from classroom_attendance.core.enums import ErrorKind
from classroom_attendance.core.exceptions import VerificationError
from classroom_attendance.sessions.token_rotator import SessionTokenRotator

from conftest import make_session

ISSUED = datetime(2025, 3, 3, 9, 5, 0)


@pytest.fixture
def rotator(tokens):
    values = iter(f"code-{i}" for i in range(100))
    return SessionTokenRotator(tokens, interval=timedelta(seconds=20), token_factory=lambda: next(values))


@pytest.fixture
def session(sessions):
    sessions.add(make_session(1))
    sessions.add(make_session(2))
    return sessions


def test_current_token_accepted_before_expiry(tokens, rotator, session):
    token = rotator.rotate(session.get_by_id(1), ISSUED)

    match = TokenVerifier(tokens).verify(
        session.get_by_id(1), TokenEvidence(token.value), now=ISSUED + timedelta(seconds=19)
    )

    assert match.detail["serial"] == token.serial


def test_current_token_expired_after_interval(tokens, rotator, session):
    token = rotator.rotate(session.get_by_id(1), ISSUED)

    with pytest.raises(VerificationError) as exc:
        TokenVerifier(tokens).verify(
            session.get_by_id(1), TokenEvidence(token.value), now=ISSUED + timedelta(seconds=21)
        )

    assert exc.value.kind == ErrorKind.TOKEN_EXPIRED


def test_superseded_token_of_same_session_is_expired(tokens, rotator, session):
    old = rotator.rotate(session.get_by_id(1), ISSUED)
    rotator.rotate(session.get_by_id(1), ISSUED + timedelta(seconds=20))

    with pytest.raises(VerificationError) as exc:
        TokenVerifier(tokens).verify(
            session.get_by_id(1), TokenEvidence(old.value), now=ISSUED + timedelta(seconds=21)
        )

    assert exc.value.kind == ErrorKind.TOKEN_EXPIRED


def test_token_of_another_session_is_mismatch(tokens, rotator, session):
    rotator.rotate(session.get_by_id(1), ISSUED)
    other = rotator.rotate(session.get_by_id(2), ISSUED)

    with pytest.raises(VerificationError) as exc:
        TokenVerifier(tokens).verify(session.get_by_id(1), TokenEvidence(other.value), now=ISSUED)

    assert exc.value.kind == ErrorKind.TOKEN_MISMATCH


def test_no_token_issued_yet_is_mismatch(tokens, session):
    with pytest.raises(VerificationError) as exc:
        TokenVerifier(tokens).verify(session.get_by_id(1), TokenEvidence("guess"), now=ISSUED)

    assert exc.value.kind == ErrorKind.TOKEN_MISMATCH
