from __future__ import annotations

import ipaddress
from datetime import datetime

from ...core.enums import ErrorKind, VerificationMethod
from ...core.exceptions import VerificationError
from ...sessions.model import Session
from ..model import Evidence, NetworkEvidence
from .base import MethodMatch, Verifier


def _candidates(address: str):
    addr = ipaddress.ip_address(address)
    yield addr
    # IPv4 clients often show up as ::ffff:a.b.c.d behind dual-stack servers.
    if addr.version == 6 and addr.ipv4_mapped is not None:
        yield addr.ipv4_mapped


class NetworkVerifier(Verifier):
    method = VerificationMethod.NETWORK

    def verify(self, session: Session, evidence: Evidence, *, now: datetime) -> MethodMatch:
        if not isinstance(evidence, NetworkEvidence) or not evidence.address:
            raise VerificationError(ErrorKind.ORIGIN_NOT_ALLOWED, "No origin address")

        try:
            candidates = list(_candidates(evidence.address))
        except ValueError:
            raise VerificationError(ErrorKind.ORIGIN_NOT_ALLOWED, "Origin address is not valid")

        for candidate in candidates:
            for net in session.network.networks:
                if candidate.version == net.version and candidate in net:
                    return MethodMatch(method=self.method, detail={"network": str(net)})

        raise VerificationError(ErrorKind.ORIGIN_NOT_ALLOWED, "Check-in is only allowed from the classroom network")
