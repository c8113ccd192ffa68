"""Dataclasses for computed aggregates. All are read-only views."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING

from .status import ServiceStatus

if TYPE_CHECKING:
    from .records import ExpenseRecord, ServiceRecord
    from .vehicle import Vehicle


@dataclass(frozen=True)
class Summary:
    """Dashboard totals for one period."""

    total_received: Decimal
    total_receivable: Decimal
    total_expenses: Decimal
    net_value: Decimal


@dataclass(frozen=True)
class VehicleBreakdown:
    """Money still to receive and money spent for one plate."""

    plate: str
    receivable: Decimal
    expenses: Decimal


@dataclass(frozen=True)
class ForecastBucket:
    """Expected receipts with due date in [start, end]."""

    label: str
    start: date
    end: date
    amount: Decimal


@dataclass(frozen=True)
class PendingService:
    """A service together with its effective status on the reference day."""

    service: "ServiceRecord"
    status: ServiceStatus
    days_overdue: Optional[int] = None

    @property
    def is_overdue(self) -> bool:
        return self.status == ServiceStatus.OVERDUE


@dataclass(frozen=True)
class MonthlyReport:
    """Exportable month consolidation."""

    year: int
    month: int
    services: List["ServiceRecord"]
    expenses: List["ExpenseRecord"]
    gross_revenue: Decimal
    total_expenses: Decimal
    commission_rate: Decimal
    commission: Decimal
    balance: Decimal

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class VehicleDetail:
    """Filtered records and financial totals of one vehicle."""

    vehicle: "Vehicle"
    services: List["ServiceRecord"] = field(default_factory=list)
    expenses: List["ExpenseRecord"] = field(default_factory=list)
    total: Decimal = Decimal("0")
    received: Decimal = Decimal("0")
    receivable: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
