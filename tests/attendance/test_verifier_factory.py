import pytest

from classroom_attendance.attendance.factory import VerifierFactory
from classroom_attendance.attendance.strategies.geofence_strategy import GeofenceVerifier
from classroom_attendance.attendance.strategies.network_strategy import NetworkVerifier
from classroom_attendance.attendance.strategies.token_strategy import TokenVerifier
from classroom_attendance.core.enums import ErrorKind, VerificationMethod
from classroom_attendance.core.exceptions import CheckInError


def test_standard_factory_covers_every_method(tokens):
    factory = VerifierFactory.standard(tokens)

    assert isinstance(factory.for_method(VerificationMethod.TOKEN), TokenVerifier)
    assert isinstance(factory.for_method(VerificationMethod.GEOFENCE), GeofenceVerifier)
    assert isinstance(factory.for_method(VerificationMethod.NETWORK), NetworkVerifier)


def test_factory_rejects_incomplete_table():
    with pytest.raises(ValueError):
        VerifierFactory({VerificationMethod.NETWORK: NetworkVerifier()})


def test_unknown_method_is_method_not_allowed(tokens):
    factory = VerifierFactory.standard(tokens)

    with pytest.raises(CheckInError) as exc:
        factory.for_method("fingerprint")

    assert exc.value.kind == ErrorKind.METHOD_NOT_ALLOWED
