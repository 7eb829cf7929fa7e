from datetime import datetime

import pytest

from classroom_attendance.attendance.model import LocationEvidence, NetworkEvidence, TokenEvidence, parse_evidence
from classroom_attendance.core.enums import ErrorKind, VerificationMethod
from classroom_attendance.core.exceptions import CheckInError


def test_token_payload():
    assert parse_evidence(VerificationMethod.TOKEN, {"token": "  abc  "}) == TokenEvidence("abc")


@pytest.mark.parametrize("payload", [None, {}, {"token": ""}, {"token": 12}])
def test_token_payload_required(payload):
    with pytest.raises(CheckInError) as exc:
        parse_evidence(VerificationMethod.TOKEN, payload)
    assert exc.value.kind == ErrorKind.INVALID_EVIDENCE


def test_location_payload():
    evidence = parse_evidence(
        VerificationMethod.GEOFENCE,
        {"latitude": "10.5", "longitude": 106.1, "accuracy": 12, "captured_at": "2025-03-03T09:01:00"},
    )
    assert evidence == LocationEvidence(
        latitude=10.5, longitude=106.1, captured_at=datetime(2025, 3, 3, 9, 1), accuracy_meters=12.0
    )


def test_unreadable_location_kept_as_missing():
    evidence = parse_evidence(VerificationMethod.GEOFENCE, {"latitude": "north", "captured_at": "yesterday"})
    assert evidence.latitude is None
    assert evidence.longitude is None
    assert evidence.captured_at is None


def test_network_payload():
    assert parse_evidence(VerificationMethod.NETWORK, {"address": " 10.0.0.1 "}) == NetworkEvidence("10.0.0.1")
    assert parse_evidence(VerificationMethod.NETWORK, {}) == NetworkEvidence(None)
