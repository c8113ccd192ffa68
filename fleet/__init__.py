"""
Fleet financial tracking models.

This package provides data models and aggregation for a crane-truck fleet:
- ServiceStatus / VehicleStatus: stored and derived statuses
- Vehicle, ServiceRecord, ExpenseRecord: fetched rows
- Period: all-time or calendar month filter over issue dates
- Ledger: snapshot aggregate (summary, per-vehicle, forecast, reports)
- split_into_installments: monthly installment plans
- fetch_snapshot: atomic load of the table files
"""

from .status import ServiceStatus, VehicleStatus
from .vehicle import Vehicle, normalize_plate
from .records import ServiceRecord, ExpenseRecord
from .period import Period
from .settings import Settings
from .summaries import (
    ForecastBucket,
    MonthlyReport,
    PendingService,
    Summary,
    VehicleBreakdown,
    VehicleDetail,
)
from .calculations import (
    days_overdue,
    derive_status,
    forecast_windows,
    month_bounds,
    parse_local_date,
)
from .ledger import AggregationFilter, Ledger
from .installments import split_into_installments
from .loader import (
    add_expense,
    add_service,
    add_vehicle,
    create_tables,
    delete_expense,
    delete_service,
    delete_vehicle,
    load_expenses,
    load_services,
    load_settings,
    load_vehicles,
    replace_service_with_installments,
    update_expense,
    update_service,
    update_vehicle,
)
from .store import LoadError, fetch_snapshot

__all__ = [
    "ServiceStatus",
    "VehicleStatus",
    "Vehicle",
    "normalize_plate",
    "ServiceRecord",
    "ExpenseRecord",
    "Period",
    "Settings",
    "ForecastBucket",
    "MonthlyReport",
    "PendingService",
    "Summary",
    "VehicleBreakdown",
    "VehicleDetail",
    "days_overdue",
    "derive_status",
    "forecast_windows",
    "month_bounds",
    "parse_local_date",
    "AggregationFilter",
    "Ledger",
    "split_into_installments",
    "add_expense",
    "add_service",
    "add_vehicle",
    "create_tables",
    "delete_expense",
    "delete_service",
    "delete_vehicle",
    "load_expenses",
    "load_services",
    "load_settings",
    "load_vehicles",
    "replace_service_with_installments",
    "update_expense",
    "update_service",
    "update_vehicle",
    "LoadError",
    "fetch_snapshot",
]
