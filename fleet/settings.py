"""Runtime configuration for aggregation and reporting."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

DEFAULT_COMMISSION_RATE = Decimal("0.01")


class Settings:
    """Commission rate for monthly reports and the zone that defines 'today'."""

    def __init__(
        self,
        commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
        timezone: Optional[str] = None,
    ):
        self.commission_rate = Decimal(str(commission_rate))
        self.timezone = timezone
        if timezone:
            # Fail early on unknown zone names
            ZoneInfo(timezone)

    def today(self) -> date:
        """Current calendar day in the configured zone, or the local day."""
        if self.timezone:
            return datetime.now(ZoneInfo(self.timezone)).date()
        return date.today()
