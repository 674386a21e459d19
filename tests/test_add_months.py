from __future__ import annotations

from datetime import date

import pytest

from app.shared.utils import add_months


@pytest.mark.parametrize(
    ("start", "months", "expected"),
    [
        (date(2024, 1, 1), 2, date(2024, 3, 1)),
        (date(2024, 3, 1), 1, date(2024, 4, 1)),
        (date(2024, 11, 15), 3, date(2025, 2, 15)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 8, 31), 1, date(2024, 9, 30)),
        (date(2024, 2, 29), 12, date(2025, 2, 28)),
    ],
)
def test_add_months_uses_calendar_months(start: date, months: int, expected: date) -> None:
    assert add_months(start, months) == expected


def test_add_months_is_not_associative_at_month_end() -> None:
    assert add_months(add_months(date(2024, 1, 31), 1), 1) == date(2024, 3, 29)
    assert add_months(date(2024, 1, 31), 2) == date(2024, 3, 31)
