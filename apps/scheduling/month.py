"""
Active-month calendar helpers.

The board schedules exactly one month, configured in settings.SHIFTBOARD
(YEAR, MONTH, HOLIDAYS). Assignments store only the day number, so every day
check goes through here.
"""

import calendar
from dataclasses import dataclass
from datetime import date

from django.conf import settings


@dataclass(frozen=True)
class ActiveMonth:
    """The month currently shown on the board."""

    year: int
    month: int
    holidays: tuple[int, ...] = ()

    @classmethod
    def from_settings(cls) -> "ActiveMonth":
        """Build the active month from settings.SHIFTBOARD."""
        config = settings.SHIFTBOARD
        return cls(
            year=config["YEAR"],
            month=config["MONTH"],
            holidays=tuple(config.get("HOLIDAYS", ())),
        )

    @property
    def name(self) -> str:
        return calendar.month_name[self.month]

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def contains(self, day: int) -> bool:
        return 1 <= day <= self.days_in_month

    def is_weekend(self, day: int) -> bool:
        return date(self.year, self.month, day).weekday() >= 5

    def is_holiday(self, day: int) -> bool:
        return day in self.holidays

    def days(self) -> list[dict]:
        """Return one entry per day with the flags the grid needs for shading."""
        return [
            {
                "day": day,
                "weekday": date(self.year, self.month, day).strftime("%a"),
                "is_weekend": self.is_weekend(day),
                "is_holiday": self.is_holiday(day),
            }
            for day in range(1, self.days_in_month + 1)
        ]

    def as_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "name": self.name,
            "days_in_month": self.days_in_month,
        }
