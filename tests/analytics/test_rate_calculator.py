import pytest

from classroom_attendance.analytics.calculator.standard_calculator import StandardRateCalculator


@pytest.mark.parametrize(
    "attended, total, expected",
    [(8, 10, 80), (0, 0, 0), (0, 5, 0), (5, 5, 100), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 200, 1)],
)
def test_rate_rounds_half_up(attended, total, expected):
    assert StandardRateCalculator().rate(attended, total) == expected
