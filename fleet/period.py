"""Period selector: all time or one calendar month."""

import re
from datetime import date
from typing import Optional, Tuple

from .calculations import month_bounds, parse_local_date

ALL = "all"

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


class Period:
    """Filter predicate over issue dates. ``month`` is None for all time."""

    def __init__(self, year: Optional[int] = None, month: Optional[int] = None):
        if (year is None) != (month is None):
            raise ValueError("year and month must be given together")
        if month is not None and not 1 <= month <= 12:
            raise ValueError(f"Invalid month: {month}")
        self.year = year
        self.month = month

    @classmethod
    def parse(cls, text: Optional[str]) -> "Period":
        """Parse the 'all' sentinel or a YYYY-MM string."""
        if text is None or text.strip().lower() == ALL:
            return cls()
        m = _MONTH_RE.match(text.strip())
        if not m:
            raise ValueError(f"Period must be '{ALL}' or YYYY-MM, got {text!r}")
        return cls(int(m.group(1)), int(m.group(2)))

    @classmethod
    def of(cls, day: date) -> "Period":
        return cls(day.year, day.month)

    @property
    def is_all(self) -> bool:
        return self.month is None

    @property
    def bounds(self) -> Optional[Tuple[date, date]]:
        """First and last day of the month, or None for all time."""
        if self.is_all:
            return None
        return month_bounds(self.year, self.month)

    def contains(self, issue_date) -> bool:
        """
        True when the issue date falls in the period.

        Absent or unparseable dates are treated as unknown and never excluded.
        """
        if self.is_all:
            return True
        day = parse_local_date(issue_date)
        if day is None:
            return True
        return (day.year, day.month) == (self.year, self.month)

    def __str__(self) -> str:
        if self.is_all:
            return ALL
        return f"{self.year:04d}-{self.month:02d}"

    def __repr__(self) -> str:
        return f"Period({str(self)!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return (self.year, self.month) == (other.year, other.month)

    def __hash__(self) -> int:
        return hash((self.year, self.month))
