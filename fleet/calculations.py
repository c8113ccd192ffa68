"""Helper functions for status derivation and money/date arithmetic."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from .status import ServiceStatus

if TYPE_CHECKING:
    from .records import ServiceRecord

ZERO = Decimal("0")

# (label, first day offset, last day offset), both ends inclusive
FORECAST_HORIZONS = [
    ("Próximos 7 dias", 0, 7),
    ("Próximos 15 dias", 8, 15),
    ("Próximos 30 dias", 16, 30),
]


def parse_local_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD value as a local calendar day.

    Date-only strings carry no zone, so no UTC conversion is applied.
    Empty or unparseable input gives None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = str(value).strip()
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def to_decimal(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Convert an amount to Decimal through its string form. None is zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value).strip() or "0")


def derive_status(service: "ServiceRecord", today: date) -> ServiceStatus:
    """
    Effective status of a service on a given day. First match wins:

    - Canceled stays Canceled
    - Paid stays Paid
    - due date strictly after today: UPCOMING
    - anything else, including a missing due date: OVERDUE
    """
    if service.status == ServiceStatus.CANCELED:
        return ServiceStatus.CANCELED
    if service.status == ServiceStatus.PAID:
        return ServiceStatus.PAID
    due = parse_local_date(service.due_date)
    if due is not None and today < due:
        return ServiceStatus.UPCOMING
    return ServiceStatus.OVERDUE


def days_overdue(service: "ServiceRecord", today: date) -> Optional[int]:
    """Whole days from due date to today, for effective-overdue services only."""
    if derive_status(service, today) != ServiceStatus.OVERDUE:
        return None
    due = parse_local_date(service.due_date)
    if due is None:
        return None
    return (today - due).days


def sum_amounts(records: Iterable, attr: str) -> Decimal:
    """Sum a Decimal attribute over records."""
    return sum((getattr(r, attr) for r in records), ZERO)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month."""
    first = date(year, month, 1)
    last = first + relativedelta(months=1, days=-1)
    return first, last


def in_window(day: Optional[date], start: date, end: date) -> bool:
    """Inclusive on both ends. A missing day is never inside."""
    return day is not None and start <= day <= end


def forecast_windows(today: date) -> List[Tuple[str, date, date]]:
    """The receipt forecast horizons relative to today."""
    return [
        (label, today + timedelta(days=first), today + timedelta(days=last))
        for label, first, last in FORECAST_HORIZONS
    ]
