from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from ...core.enums import VerificationMethod
from ...sessions.model import Session
from ..model import Evidence


@dataclass(frozen=True)
class MethodMatch:
    """Successful verification, with details worth keeping on the record."""

    method: VerificationMethod
    detail: Mapping[str, Any] = field(default_factory=dict)


class Verifier(ABC):
    """Strategy Pattern: check one kind of evidence against session config.

    Verifiers are pure predicates: they raise ``VerificationError`` on a
    mismatch and never write anything.
    """

    method: VerificationMethod

    @abstractmethod
    def verify(self, session: Session, evidence: Evidence, *, now: datetime) -> MethodMatch:
        raise NotImplementedError
