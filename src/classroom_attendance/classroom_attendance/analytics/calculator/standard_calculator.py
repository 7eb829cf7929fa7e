from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .base import RateCalculator


class StandardRateCalculator(RateCalculator):
    """Standard rule: attended / total * 100, half rounded up; 0 when total is 0."""

    def rate(self, attended: int, total: int) -> int:
        if total <= 0:
            return 0
        percent = Decimal(attended) * 100 / Decimal(total)
        return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
