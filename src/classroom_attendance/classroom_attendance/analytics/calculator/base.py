from __future__ import annotations

from abc import ABC, abstractmethod


class RateCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance rates)."""

    @abstractmethod
    def rate(self, attended: int, total: int) -> int:
        raise NotImplementedError
