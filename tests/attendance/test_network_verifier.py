from datetime import datetime

import pytest

from classroom_attendance.attendance.model import NetworkEvidence
from classroom_attendance.attendance.strategies.network_strategy import NetworkVerifier
from classroom_attendance.core.enums import ErrorKind, VerificationMethod
from classroom_attendance.core.exceptions import ValidationError, VerificationError

from conftest import make_session

NOW = datetime(2025, 3, 3, 9, 5)


@pytest.fixture
def session():
    return make_session(method=VerificationMethod.NETWORK, ranges=("192.168.10.0/24", "2001:db8:10::/48"))


@pytest.mark.parametrize("address", ["192.168.10.23", "::ffff:192.168.10.23", "2001:db8:10::5"])
def test_addresses_inside_ranges_accepted(session, address):
    match = NetworkVerifier().verify(session, NetworkEvidence(address), now=NOW)
    assert match.detail["network"] in {"192.168.10.0/24", "2001:db8:10::/48"}


@pytest.mark.parametrize("address", ["192.168.11.5", "10.0.0.1", "2001:db8:11::1", "not-an-ip", "", None])
def test_other_addresses_rejected(session, address):
    with pytest.raises(VerificationError) as exc:
        NetworkVerifier().verify(session, NetworkEvidence(address), now=NOW)
    assert exc.value.kind == ErrorKind.ORIGIN_NOT_ALLOWED


def test_host_bits_in_range_are_tolerated():
    session = make_session(method=VerificationMethod.NETWORK, ranges=("10.1.2.3/16",))
    NetworkVerifier().verify(session, NetworkEvidence("10.1.200.1"), now=NOW)


def test_invalid_range_rejected_at_configuration():
    with pytest.raises(ValidationError):
        make_session(method=VerificationMethod.NETWORK, ranges=("10.1.2.300/16",))
