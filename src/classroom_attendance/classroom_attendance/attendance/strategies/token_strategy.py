from __future__ import annotations

import hmac
from datetime import datetime

from ...core.enums import ErrorKind, VerificationMethod
from ...core.exceptions import VerificationError
from ...sessions.model import Session
from ...sessions.repository import SessionTokenRepository
from ..model import Evidence, TokenEvidence
from .base import MethodMatch, Verifier


class TokenVerifier(Verifier):
    """Accepts only the session's current, unexpired token.

    The current token is read from the session snapshot, never from a
    separate lookup, so a concurrent rotation cannot be half-observed.
    """

    method = VerificationMethod.TOKEN

    def __init__(self, tokens: SessionTokenRepository):
        self._tokens = tokens

    def verify(self, session: Session, evidence: Evidence, *, now: datetime) -> MethodMatch:
        if not isinstance(evidence, TokenEvidence):
            raise VerificationError(ErrorKind.TOKEN_MISMATCH, "Token evidence expected")

        current = session.current_token
        if current is not None and hmac.compare_digest(current.value.encode(), evidence.token.encode()):
            if current.is_expired(now):
                raise VerificationError(ErrorKind.TOKEN_EXPIRED, "The code has expired, scan the new one")
            return MethodMatch(method=self.method, detail={"serial": current.serial})

        if self._tokens.find_by_value(session.session_id, evidence.token) is not None:
            raise VerificationError(ErrorKind.TOKEN_EXPIRED, "The code has been replaced, scan the new one")

        raise VerificationError(ErrorKind.TOKEN_MISMATCH, "The code does not belong to this session")
