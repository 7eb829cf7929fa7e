from __future__ import annotations

from datetime import timedelta
from typing import Mapping, Optional

from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import ErrorKind, VerificationMethod
from ..core.exceptions import CheckInError
from ..sessions.repository import SessionTokenRepository
from .strategies.base import Verifier
from .strategies.geofence_strategy import GeofenceVerifier
from .strategies.network_strategy import NetworkVerifier
from .strategies.token_strategy import TokenVerifier


class VerifierFactory:
    """Factory Pattern: closed mapping from a session's method to its verifier."""

    def __init__(self, verifiers: Mapping[VerificationMethod, Verifier]):
        missing = set(VerificationMethod) - set(verifiers)
        if missing:
            raise ValueError(f"No verifier for: {', '.join(sorted(m.value for m in missing))}")
        self._verifiers = dict(verifiers)

    @classmethod
    def standard(
        cls,
        tokens: SessionTokenRepository,
        *,
        max_fix_age: Optional[timedelta] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ) -> "VerifierFactory":
        return cls(
            {
                VerificationMethod.TOKEN: TokenVerifier(tokens),
                VerificationMethod.GEOFENCE: GeofenceVerifier(max_fix_age=max_fix_age, timezone=timezone),
                VerificationMethod.NETWORK: NetworkVerifier(),
            }
        )

    def for_method(self, method: VerificationMethod) -> Verifier:
        try:
            return self._verifiers[method]
        except KeyError:
            raise CheckInError(ErrorKind.METHOD_NOT_ALLOWED, f"Unsupported method {method!r}")
