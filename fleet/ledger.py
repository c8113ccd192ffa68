"""Ledger class - the snapshot aggregate behind every financial view."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence

from .calculations import (
    ZERO,
    days_overdue,
    derive_status,
    forecast_windows,
    in_window,
    month_bounds,
    parse_local_date,
    sum_amounts,
)
from .period import ALL, Period
from .records import ExpenseRecord, ServiceRecord
from .settings import Settings
from .status import FORECASTABLE, OPEN, RECEIVABLE, ServiceStatus
from .summaries import (
    ForecastBucket,
    MonthlyReport,
    PendingService,
    Summary,
    VehicleBreakdown,
    VehicleDetail,
)
from .vehicle import Vehicle, normalize_plate


@dataclass(frozen=True)
class AggregationFilter:
    """Selected period, selected vehicle and reference day for one view."""

    period: Period = field(default_factory=Period)
    plate: Optional[str] = None
    today: date = field(default_factory=date.today)

    @property
    def all_vehicles(self) -> bool:
        return self.plate is None or self.plate.strip().lower() == ALL

    def matches_plate(self, plate: str) -> bool:
        return self.all_vehicles or normalize_plate(self.plate) == plate


def _sorted_missing_last(items: list, key: Callable, reverse: bool = False) -> list:
    """Sort by key; items whose key is None go last in either direction."""
    present = [i for i in items if key(i) is not None]
    missing = [i for i in items if key(i) is None]
    return sorted(present, key=key, reverse=reverse) + missing


def _contains(term: str, *values: Optional[str]) -> bool:
    return any(term in (v or "").lower() for v in values)


SERVICE_SORT_KEYS = {
    "issue_date": lambda s: s.issued_on,
    "due_date": lambda s: s.due_on,
    "payment_date": lambda s: parse_local_date(s.payment_date),
    "amount": lambda s: s.gross_amount,
    "client": lambda s: s.client,
}

EXPENSE_SORT_KEYS = {
    "issue_date": lambda e: e.issued_on,
    "due_date": lambda e: parse_local_date(e.due_date),
    "amount": lambda e: e.total_amount,
    "vendor": lambda e: e.vendor,
}


class Ledger:
    """
    Fetched vehicles, services and expenses.

    Every method recomputes from the snapshot and never mutates records,
    so calling one twice with the same arguments gives the same result.
    """

    def __init__(
        self,
        vehicles: Sequence[Vehicle],
        services: Sequence[ServiceRecord],
        expenses: Sequence[ExpenseRecord],
        settings: Optional[Settings] = None,
    ):
        self.vehicles = tuple(vehicles)
        self.services = tuple(services)
        self.expenses = tuple(expenses)
        self.settings = settings or Settings()

    def get_vehicle(self, plate: str) -> Optional[Vehicle]:
        """Find a vehicle by plate (case-insensitive)."""
        plate = normalize_plate(plate)
        for vehicle in self.vehicles:
            if vehicle.plate == plate:
                return vehicle
        return None

    def services_in(self, period: Period) -> List[ServiceRecord]:
        return [s for s in self.services if period.contains(s.issue_date)]

    def expenses_in(self, period: Period) -> List[ExpenseRecord]:
        return [e for e in self.expenses if period.contains(e.issue_date)]

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    def summary(self, period: Optional[Period] = None) -> Summary:
        """
        Totals over services and expenses issued in the period.

        Received and receivable use the stored status, not the derived one,
        so an upcoming service still counts as receivable.
        """
        period = period or Period()
        services = self.services_in(period)
        received = sum_amounts(
            (s for s in services if s.status == ServiceStatus.PAID), "gross_amount"
        )
        receivable = sum_amounts(
            (s for s in services if s.status in RECEIVABLE), "gross_amount"
        )
        expenses = sum_amounts(self.expenses_in(period), "total_amount")
        return Summary(
            total_received=received,
            total_receivable=receivable,
            total_expenses=expenses,
            net_value=received - expenses,
        )

    def vehicle_breakdown(self, period: Optional[Period] = None) -> List[VehicleBreakdown]:
        """Receivable and expenses per known vehicle, omitting idle ones."""
        period = period or Period()
        services = self.services_in(period)
        expenses = self.expenses_in(period)

        result = []
        for vehicle in self.vehicles:
            receivable = sum_amounts(
                (
                    s
                    for s in services
                    if s.plate == vehicle.plate and s.status in RECEIVABLE
                ),
                "gross_amount",
            )
            spent = sum_amounts(
                (e for e in expenses if e.plate == vehicle.plate), "total_amount"
            )
            if receivable > 0 or spent > 0:
                result.append(VehicleBreakdown(vehicle.plate, receivable, spent))
        return result

    def _forecastable(self, today: date) -> List[ServiceRecord]:
        return [s for s in self.services if derive_status(s, today) in FORECASTABLE]

    @staticmethod
    def _bucketize(services: List[ServiceRecord], today: date) -> List[ForecastBucket]:
        buckets = []
        for label, start, end in forecast_windows(today):
            amount = sum_amounts(
                (s for s in services if in_window(s.due_on, start, end)),
                "gross_amount",
            )
            buckets.append(ForecastBucket(label, start, end, amount))
        return buckets

    def forecast(self, today: date) -> List[ForecastBucket]:
        """Expected receipts for the next 7, 8-15 and 16-30 days."""
        return self._bucketize(self._forecastable(today), today)

    def forecast_by_vehicle(self, today: date) -> Dict[str, List[ForecastBucket]]:
        """The receipt forecast per plate with at least one forecastable service."""
        forecastable = self._forecastable(today)
        plates = list(dict.fromkeys(s.plate for s in forecastable))
        return {
            plate: self._bucketize([s for s in forecastable if s.plate == plate], today)
            for plate in plates
        }

    def pending_services(self, selection: AggregationFilter) -> List[PendingService]:
        """
        Open services for the selected period and vehicle.

        Sorted by due date ascending; services without a due date go last.
        """
        today = selection.today
        pending = []
        for service in self.services:
            status = derive_status(service, today)
            if status not in OPEN:
                continue
            if not selection.period.contains(service.issue_date):
                continue
            if not selection.matches_plate(service.plate):
                continue
            pending.append(
                PendingService(service, status, days_overdue(service, today))
            )
        return _sorted_missing_last(pending, key=lambda p: p.service.due_on)

    def month_options(self) -> List[str]:
        """Distinct YYYY-MM of every issue date, newest first."""
        months = set()
        for record in (*self.services, *self.expenses):
            day = record.issued_on
            if day is not None:
                months.add(f"{day.year:04d}-{day.month:02d}")
        return sorted(months, reverse=True)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def monthly_report(
        self, year: int, month: int, commission_rate: Optional[Decimal] = None
    ) -> MonthlyReport:
        """
        Month consolidation over records issued between the first and last
        day of the month (inclusive). Canceled services are not revenue.
        """
        start, end = month_bounds(year, month)
        rate = (
            self.settings.commission_rate
            if commission_rate is None
            else Decimal(str(commission_rate))
        )

        services = sorted(
            (s for s in self.services if in_window(s.issued_on, start, end)),
            key=lambda s: s.issued_on,
        )
        expenses = sorted(
            (e for e in self.expenses if in_window(e.issued_on, start, end)),
            key=lambda e: e.issued_on,
        )

        gross = sum_amounts(
            (s for s in services if s.status != ServiceStatus.CANCELED), "gross_amount"
        )
        spent = sum_amounts(expenses, "total_amount")
        commission = gross * rate
        return MonthlyReport(
            year=year,
            month=month,
            services=services,
            expenses=expenses,
            gross_revenue=gross,
            total_expenses=spent,
            commission_rate=rate,
            commission=commission,
            balance=gross - spent - commission,
        )

    # -------------------------------------------------------------------------
    # Vehicle pages
    # -------------------------------------------------------------------------

    def vehicle_detail(
        self,
        plate: str,
        search: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        sort_by: Optional[str] = None,
        reverse: bool = False,
    ) -> VehicleDetail:
        """
        Services and expenses of one vehicle filtered by a search term and
        an issue-date range, with the vehicle's financial totals.

        Args:
            search: case-insensitive substring over the text fields
            start: range start; with no end, keeps records on or after it
            end: range end (inclusive), ignored without a start
            sort_by: "issue_date", "due_date", "amount", ... (missing last)
        """
        plate = normalize_plate(plate)
        vehicle = self.get_vehicle(plate) or Vehicle(plate)
        term = (search or "").lower()

        def date_match(record) -> bool:
            day = record.issued_on
            if start is None or day is None:
                return True
            if end is None:
                return day >= start
            return start <= day <= end

        services = [
            s
            for s in self.services
            if s.plate == plate
            and date_match(s)
            and _contains(
                term,
                s.order_number,
                s.client,
                s.operator,
                s.invoice_number,
                s.boleto,
                s.status.value,
                s.note,
                s.created_by,
            )
        ]
        expenses = [
            e
            for e in self.expenses
            if e.plate == plate
            and date_match(e)
            and _contains(term, e.vendor, e.description, e.note, e.created_by)
        ]

        if sort_by is not None:
            if sort_by in SERVICE_SORT_KEYS:
                services = _sorted_missing_last(
                    services, SERVICE_SORT_KEYS[sort_by], reverse
                )
            if sort_by in EXPENSE_SORT_KEYS:
                expenses = _sorted_missing_last(
                    expenses, EXPENSE_SORT_KEYS[sort_by], reverse
                )

        return VehicleDetail(
            vehicle=vehicle,
            services=services,
            expenses=expenses,
            total=sum_amounts(
                (s for s in services if s.status != ServiceStatus.CANCELED),
                "gross_amount",
            ),
            received=sum_amounts(
                (s for s in services if s.status == ServiceStatus.PAID), "gross_amount"
            ),
            receivable=sum_amounts(
                (s for s in services if s.status in RECEIVABLE), "gross_amount"
            ),
            total_expenses=sum_amounts(expenses, "total_amount"),
        )

    def search_vehicles(self, term: Optional[str] = None) -> List[Vehicle]:
        """Vehicles whose plate or model contains the term."""
        term = (term or "").lower()
        return [v for v in self.vehicles if _contains(term, v.plate, v.model)]

    def find_plate_by_order(self, order_number: str) -> Optional[str]:
        """Plate of the first service with this order number (OS)."""
        return self._find_plate(lambda s: s.order_number, order_number)

    def find_plate_by_invoice(self, invoice_number: str) -> Optional[str]:
        """Plate of the first service with this invoice number (NF)."""
        return self._find_plate(lambda s: s.invoice_number, invoice_number)

    def _find_plate(self, field_of: Callable, term: Optional[str]) -> Optional[str]:
        term = (term or "").strip()
        if not term:
            return None
        for service in self.services:
            if (field_of(service) or "").strip() == term:
                return service.plate
        return None
