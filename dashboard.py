#!/usr/bin/env python3
"""
Unified CLI for the fleet financial dashboard.

Commands:
  summary         - Received, receivable, expenses and net value
  vehicles        - Receivable and expenses per vehicle
  forecast        - Expected receipts for the next 30 days
  pending         - Open services with their effective status
  report          - Monthly report with commission and balance
  detail          - Services and expenses of one vehicle
  months          - Months with recorded activity
  lookup          - Find the vehicle of an order (OS) or invoice (NF) number
  validate        - Check the table files against the schema
  init            - Create empty table files
  list-vehicles   - List vehicles, optionally matching plate or model
  add-vehicle     - Register a vehicle
  edit-vehicle    - Change model, year or status of a vehicle
  delete-vehicle  - Remove a vehicle
  add-service     - Record a service
  edit-service    - Change fields of a service
  delete-service  - Remove a service
  pay             - Mark a service as paid
  installments    - Split a service into monthly installments
  add-expense     - Record an expense
  edit-expense    - Change fields of an expense
  delete-expense  - Remove an expense
"""

import argparse
import logging
import os
import re
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from tabulate import tabulate
from typing import Dict, List, Optional

import yaml

from fleet import (
    AggregationFilter,
    ExpenseRecord,
    ForecastBucket,
    LoadError,
    Ledger,
    MonthlyReport,
    PendingService,
    Period,
    ServiceRecord,
    ServiceStatus,
    Summary,
    Vehicle,
    VehicleBreakdown,
    VehicleStatus,
    add_expense,
    add_service,
    add_vehicle,
    create_tables,
    delete_expense,
    delete_service,
    delete_vehicle,
    fetch_snapshot,
    load_expenses,
    load_services,
    load_vehicles,
    normalize_plate,
    parse_local_date,
    replace_service_with_installments,
    split_into_installments,
    update_expense,
    update_service,
    update_vehicle,
)
from fleet.loader import EXPENSES_FILE, SERVICES_FILE, SETTINGS_FILE, VEHICLES_FILE
from fleet.store import TABLES
from fleet.validation import load_schema, validate_table_file

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = "data"

AMBIGUOUS_AMOUNT_RE = re.compile(r"^\d{1,3}(\.\d{3})+$")

# =============================================================================
# Formatting helpers
# =============================================================================


def format_money(value: Optional[Decimal]) -> str:
    """Format an amount as Brazilian reais (R$ 1.234,56)."""
    if value is None:
        return "-"
    text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if value < 0 else ""
    return f"{sign}R$ {text}"


def format_date(value) -> str:
    """Format a stored date as dd/mm/yyyy."""
    day = parse_local_date(value)
    return day.strftime("%d/%m/%Y") if day else "-"


def format_rate(rate: Decimal) -> str:
    """Format a fraction as a percentage (0.01 -> 1%)."""
    return f"{(rate * 100).normalize():f}%"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_amount(text: str) -> Decimal:
    """
    Parse an amount typed as 1234.56 or 1.234,56.

    Without a comma, dots grouping exactly three digits (1.500) are rejected:
    they could be thousands or decimals.
    """
    cleaned = text.strip().replace("R$", "").strip()
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    elif AMBIGUOUS_AMOUNT_RE.match(cleaned):
        raise ValueError(f"Ambiguous amount {text!r}: use 1500.00 or 1.500,00")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {text!r}")
    if value < 0:
        raise ValueError("Amounts cannot be negative")
    return value


def parse_rate(text: str) -> Decimal:
    """Parse a commission rate between 0 and 1 (0.01 or 0,01)."""
    try:
        rate = Decimal(text.strip().replace(",", "."))
    except InvalidOperation:
        raise ValueError(f"Invalid rate: {text!r}")
    if not 0 <= rate <= 1:
        raise ValueError("Commission rate must be between 0 and 1")
    return rate


def parse_day(text: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD option, rejecting bad input."""
    if text is None:
        return None
    day = parse_local_date(text)
    if day is None:
        raise ValueError(f"Invalid date {text!r}, expected YYYY-MM-DD")
    return day


# =============================================================================
# Table builders
# =============================================================================


def make_summary_table(summary: Summary) -> List[List[str]]:
    """Convert a dashboard summary to table rows."""
    return [
        ["Total recebido", format_money(summary.total_received)],
        ["Total a receber", format_money(summary.total_receivable)],
        ["Despesas", format_money(summary.total_expenses)],
        ["Valor líquido", format_money(summary.net_value)],
    ]


def make_breakdown_table(breakdown: List[VehicleBreakdown]) -> List[List[str]]:
    """Convert per-vehicle totals to table rows."""
    return [
        [item.plate, format_money(item.receivable), format_money(item.expenses)]
        for item in breakdown
    ]


def make_forecast_table(buckets: List[ForecastBucket]) -> List[List[str]]:
    """Convert forecast buckets to table rows."""
    return [
        [
            b.label,
            f"{format_date(b.start)} - {format_date(b.end)}",
            format_money(b.amount),
        ]
        for b in buckets
    ]


def make_pending_table(pending: List[PendingService]) -> List[List[str]]:
    """Convert pending services to table rows."""
    rows = []
    for item in pending:
        svc = item.service
        overdue = f"{item.days_overdue}d" if item.days_overdue is not None else "-"
        rows.append(
            [
                svc.id,
                svc.order_number or "-",
                truncate(svc.client, 25),
                svc.plate,
                format_date(svc.due_date),
                format_money(svc.gross_amount),
                item.status.value,
                overdue,
            ]
        )
    return rows


def make_services_table(services: List[ServiceRecord]) -> List[List[str]]:
    """Convert services to table rows."""
    return [
        [
            s.id,
            format_date(s.issue_date),
            s.order_number or "-",
            truncate(s.client, 25),
            format_date(s.due_date),
            format_money(s.gross_amount),
            s.status.value,
            truncate(s.note),
        ]
        for s in services
    ]


def make_expenses_table(expenses: List[ExpenseRecord]) -> List[List[str]]:
    """Convert expenses to table rows."""
    return [
        [
            e.id,
            format_date(e.issue_date),
            truncate(e.label, 30),
            e.plate,
            format_money(e.total_amount),
        ]
        for e in expenses
    ]


def make_report_summary_table(report: MonthlyReport) -> List[List[str]]:
    """Convert a monthly report's totals to table rows."""
    return [
        ["Faturamento bruto", format_money(report.gross_revenue)],
        ["Total de despesas", format_money(report.total_expenses)],
        [f"Comissão ({format_rate(report.commission_rate)})", format_money(report.commission)],
        ["Saldo do mês", format_money(report.balance)],
    ]


SERVICE_HEADERS = ["ID", "Data", "OS", "Cliente", "Vencimento", "Valor", "Status", "Obs."]
EXPENSE_HEADERS = ["ID", "Data", "Fornecedor/Descrição", "Veículo", "Valor"]


# =============================================================================
# Data access
# =============================================================================


def open_ledger(args) -> Ledger:
    """Fetch the snapshot; LoadError propagates to main."""
    return fetch_snapshot(args.data_dir)


def resolve_today(args, ledger: Ledger) -> date:
    """Reference day from --today, else the configured zone's today."""
    return parse_day(getattr(args, "today", None)) or ledger.settings.today()


# =============================================================================
# Dashboard commands
# =============================================================================


def cmd_summary(args):
    """Show received, receivable, expenses and net value."""
    period = Period.parse(args.month)
    ledger = open_ledger(args)

    print(f"Período: {period}")
    print(tabulate(make_summary_table(ledger.summary(period)), tablefmt="simple"))
    return 0


def cmd_vehicles(args):
    """Show receivable and expenses per vehicle."""
    period = Period.parse(args.month)
    ledger = open_ledger(args)
    breakdown = ledger.vehicle_breakdown(period)

    print(f"Período: {period}")
    if not breakdown:
        print("Nenhum veículo com movimento no período.")
        return 0
    headers = ["Veículo", "A receber", "Despesas"]
    print(tabulate(make_breakdown_table(breakdown), headers=headers, tablefmt="simple"))
    return 0


def cmd_forecast(args):
    """Show expected receipts globally and per vehicle."""
    ledger = open_ledger(args)
    today = resolve_today(args, ledger)
    headers = ["Período", "Vencimentos", "Valor"]

    print(f"Previsão de recebimento (hoje: {format_date(today)})")
    print(tabulate(make_forecast_table(ledger.forecast(today)), headers=headers, tablefmt="simple"))
    print()

    per_vehicle: Dict[str, List[ForecastBucket]] = ledger.forecast_by_vehicle(today)
    for plate, buckets in per_vehicle.items():
        print(f"{plate}:")
        print(tabulate(make_forecast_table(buckets), headers=headers, tablefmt="simple"))
        print()
    return 0


def cmd_pending(args):
    """Show open services for the selected period and vehicle."""
    ledger = open_ledger(args)
    selection = AggregationFilter(
        period=Period.parse(args.month),
        plate=args.plate,
        today=resolve_today(args, ledger),
    )
    pending = ledger.pending_services(selection)

    print(f"Período: {selection.period}  Veículo: {args.plate or 'todos'}")
    if not pending:
        print("Nenhum serviço pendente.")
        return 0
    headers = ["ID", "OS", "Cliente", "Veículo", "Vencimento", "Valor", "Status", "Atraso"]
    print(tabulate(make_pending_table(pending), headers=headers, tablefmt="simple"))
    return 0


def cmd_report(args):
    """Show the monthly report."""
    period = Period.parse(args.month)
    if period.is_all:
        print("Error: report needs a month in YYYY-MM format")
        return 1
    ledger = open_ledger(args)
    rate = parse_rate(args.commission_rate) if args.commission_rate else None
    report = ledger.monthly_report(period.year, period.month, rate)

    print(f"Relatório mensal: {report.period}")
    print(tabulate(make_report_summary_table(report), tablefmt="simple"))
    print()
    print("Serviços realizados:")
    if report.services:
        print(tabulate(make_services_table(report.services), headers=SERVICE_HEADERS, tablefmt="simple"))
    else:
        print("  (nenhum)")
    print()
    print("Despesas do mês:")
    if report.expenses:
        print(tabulate(make_expenses_table(report.expenses), headers=EXPENSE_HEADERS, tablefmt="simple"))
    else:
        print("  (nenhuma)")
    return 0


def cmd_detail(args):
    """Show services, expenses and totals of one vehicle."""
    ledger = open_ledger(args)
    detail = ledger.vehicle_detail(
        args.plate,
        search=args.search,
        start=parse_day(args.date_from),
        end=parse_day(args.date_to),
        sort_by=args.sort,
        reverse=args.desc,
    )

    print(f"Veículo: {detail.vehicle.name}")
    if ledger.get_vehicle(args.plate) is None:
        print("(placa não cadastrada)")
    print(
        tabulate(
            [
                ["Saldo total", format_money(detail.total)],
                ["Saldo recebido", format_money(detail.received)],
                ["A receber", format_money(detail.receivable)],
                ["Total despesas", format_money(detail.total_expenses)],
            ],
            tablefmt="simple",
        )
    )
    print()
    print(f"Serviços ({len(detail.services)}):")
    if detail.services:
        print(tabulate(make_services_table(detail.services), headers=SERVICE_HEADERS, tablefmt="simple"))
    print()
    print(f"Despesas ({len(detail.expenses)}):")
    if detail.expenses:
        print(tabulate(make_expenses_table(detail.expenses), headers=EXPENSE_HEADERS, tablefmt="simple"))
    return 0


def cmd_months(args):
    """List months with services or expenses, newest first."""
    ledger = open_ledger(args)
    for month in ledger.month_options():
        print(month)
    return 0


def cmd_lookup(args):
    """Find which vehicle an order or invoice number belongs to."""
    ledger = open_ledger(args)
    if args.os:
        plate = ledger.find_plate_by_order(args.os)
        missing = "OS não encontrada."
    else:
        plate = ledger.find_plate_by_invoice(args.nf)
        missing = "NF não encontrada."
    print(plate or missing)
    return 0 if plate else 1


# =============================================================================
# Maintenance commands
# =============================================================================


def cmd_validate(args):
    """Validate every table file in the data directory."""
    data_dir = Path(args.data_dir)
    files = [(filename, table) for table, (filename, _) in TABLES.items()]
    if (data_dir / SETTINGS_FILE).exists():
        files.append((SETTINGS_FILE, "settings"))

    all_valid = True
    for filename, table in files:
        errors = validate_table_file(data_dir / filename, load_schema(table))
        if errors:
            print(f"FAIL: {filename}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filename}")
    return 0 if all_valid else 1


def cmd_init(args):
    """Create empty table files."""
    rate = parse_rate(args.commission_rate) if args.commission_rate else None
    create_tables(args.data_dir, rate)
    print(f"Tables ready in {args.data_dir}")
    return 0


def table_file(args, filename: str) -> Path:
    """Path of a table file that must already exist."""
    path = Path(args.data_dir) / filename
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path} (run init first)")
    return path


def _apply_text(record, args, fields: Dict[str, str]) -> None:
    """Copy the given text options onto a record. An empty value clears the field."""
    for option, attr in fields.items():
        value = getattr(args, option)
        if value is not None:
            setattr(record, attr, value.strip() or None)


def _apply_dates(record, args, fields: Dict[str, str]) -> None:
    for option, attr in fields.items():
        value = getattr(args, option)
        if value is not None:
            setattr(record, attr, parse_day(value).isoformat() if value.strip() else None)


def _apply_plate(record, args) -> None:
    if args.plate is not None:
        plate = normalize_plate(args.plate)
        if not plate:
            raise ValueError("Plate cannot be empty")
        record.plate = plate


# Vehicles


def make_vehicles_table(vehicles: List[Vehicle]) -> List[List[str]]:
    """Convert vehicles to table rows."""
    return [
        [v.plate, v.model or "-", v.year or "-", v.status.value] for v in vehicles
    ]


def cmd_list_vehicles(args):
    """List registered vehicles, optionally matching a plate or model."""
    ledger = open_ledger(args)
    vehicles = ledger.search_vehicles(args.search)
    if not vehicles:
        print("Nenhum veículo encontrado.")
        return 0
    headers = ["Placa", "Modelo", "Ano", "Status"]
    print(tabulate(make_vehicles_table(vehicles), headers=headers, tablefmt="simple"))
    return 0


def cmd_add_vehicle(args):
    """Register a vehicle."""
    path = table_file(args, VEHICLES_FILE)
    vehicle = Vehicle(
        args.plate, args.model, args.year, VehicleStatus(args.status)
    )
    if not vehicle.plate:
        raise ValueError("Plate cannot be empty")
    add_vehicle(path, vehicle)
    print(f"Vehicle {vehicle.plate} saved.")
    return 0


def _find_vehicle(path: Path, plate: str) -> Vehicle:
    plate = normalize_plate(plate)
    for vehicle in load_vehicles(path):
        if vehicle.plate == plate:
            return vehicle
    raise KeyError(f"Vehicle {plate} not found")


def cmd_edit_vehicle(args):
    """Change the model, year or status of a vehicle."""
    path = table_file(args, VEHICLES_FILE)
    vehicle = _find_vehicle(path, args.plate)
    _apply_text(vehicle, args, {"model": "model"})
    if args.year is not None:
        vehicle.year = args.year
    if args.status is not None:
        vehicle.status = VehicleStatus(args.status)
    update_vehicle(path, vehicle.plate, vehicle)
    print(f"Vehicle {vehicle.plate} updated.")
    return 0


def cmd_delete_vehicle(args):
    """Remove a vehicle. Its services and expenses are kept."""
    path = table_file(args, VEHICLES_FILE)
    plate = normalize_plate(args.plate)
    delete_vehicle(path, plate)
    print(f"Vehicle {plate} deleted.")
    return 0


# Services

SERVICE_TEXT_OPTIONS = {
    "client": "client",
    "os": "order_number",
    "nf": "invoice_number",
    "boleto": "boleto",
    "operator": "operator",
    "note": "note",
}


def cmd_add_service(args):
    """Record a new service."""
    path = table_file(args, SERVICES_FILE)
    service = ServiceRecord(
        id=None,
        client=args.client,
        plate=args.plate,
        gross_amount=parse_amount(args.amount),
        issue_date=(parse_day(args.date) or date.today()).isoformat(),
        due_date=parse_day(args.due).isoformat() if args.due else None,
        status=ServiceStatus.PENDING,
        note=args.note,
        created_by=args.by,
        order_number=args.os,
        invoice_number=args.nf,
        operator=args.operator,
        boleto=args.boleto,
    )

    print(f"Adding service to {args.data_dir}:")
    print(f"  Client:  {service.client}")
    print(f"  Vehicle: {service.plate}")
    print(f"  Date:    {format_date(service.issue_date)}")
    print(f"  Due:     {format_date(service.due_date)}")
    print(f"  Amount:  {format_money(service.gross_amount)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    service_id = add_service(path, service)
    print(f"Service {service_id} saved.")
    return 0


def _find_service(path: Path, service_id: int) -> ServiceRecord:
    for service in load_services(path):
        if service.id == service_id:
            return service
    raise KeyError(f"Service {service_id} not found")


def cmd_edit_service(args):
    """Change fields of a stored service."""
    path = table_file(args, SERVICES_FILE)
    service = _find_service(path, args.service_id)
    _apply_text(service, args, SERVICE_TEXT_OPTIONS)
    _apply_plate(service, args)
    _apply_dates(
        service, args, {"date": "issue_date", "due": "due_date", "paid_on": "payment_date"}
    )
    if args.amount is not None:
        service.gross_amount = parse_amount(args.amount)
    if args.status is not None:
        service.status = ServiceStatus.from_stored(args.status)
    update_service(path, service)
    print(f"Service {service.id} updated.")
    return 0


def cmd_delete_service(args):
    """Remove a service."""
    path = table_file(args, SERVICES_FILE)
    delete_service(path, args.service_id)
    print(f"Service {args.service_id} deleted.")
    return 0


def cmd_pay(args):
    """Mark a service as paid."""
    path = table_file(args, SERVICES_FILE)
    service = _find_service(path, args.service_id)
    if service.status == ServiceStatus.CANCELED:
        print(f"Error: service {service.id} is canceled")
        return 1

    service.status = ServiceStatus.PAID
    service.payment_date = (parse_day(args.date) or date.today()).isoformat()
    update_service(path, service)
    print(f"Service {service.id} paid on {format_date(service.payment_date)}.")
    return 0


def cmd_installments(args):
    """Replace a service by monthly installments."""
    path = table_file(args, SERVICES_FILE)
    service = _find_service(path, args.service_id)
    installments = split_into_installments(service, args.count, created_by=args.by)

    print(f"Splitting service {service.id} ({format_money(service.gross_amount)}):")
    print(tabulate(make_services_table(installments), headers=SERVICE_HEADERS, tablefmt="simple"))
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    ids = replace_service_with_installments(path, service.id, installments)
    print(f"Installments saved: {', '.join(str(i) for i in ids)}")
    return 0


# Expenses


def cmd_add_expense(args):
    """Record a new expense."""
    path = table_file(args, EXPENSES_FILE)
    expense = ExpenseRecord(
        id=None,
        vendor=args.vendor,
        description=args.description,
        plate=args.plate,
        total_amount=parse_amount(args.amount),
        issue_date=(parse_day(args.date) or date.today()).isoformat(),
        due_date=parse_day(args.due).isoformat() if args.due else None,
        note=args.note,
        created_by=args.by,
    )

    print(f"Adding expense to {args.data_dir}:")
    print(f"  Vendor:  {expense.label}")
    print(f"  Vehicle: {expense.plate}")
    print(f"  Date:    {format_date(expense.issue_date)}")
    print(f"  Amount:  {format_money(expense.total_amount)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    expense_id = add_expense(path, expense)
    print(f"Expense {expense_id} saved.")
    return 0


def _find_expense(path: Path, expense_id: int) -> ExpenseRecord:
    for expense in load_expenses(path):
        if expense.id == expense_id:
            return expense
    raise KeyError(f"Expense {expense_id} not found")


def cmd_edit_expense(args):
    """Change fields of a stored expense."""
    path = table_file(args, EXPENSES_FILE)
    expense = _find_expense(path, args.expense_id)
    _apply_text(
        expense, args, {"vendor": "vendor", "description": "description", "note": "note"}
    )
    _apply_plate(expense, args)
    _apply_dates(expense, args, {"date": "issue_date", "due": "due_date"})
    if args.amount is not None:
        expense.total_amount = parse_amount(args.amount)
    update_expense(path, expense)
    print(f"Expense {expense.id} updated.")
    return 0


def cmd_delete_expense(args):
    """Remove an expense."""
    path = table_file(args, EXPENSES_FILE)
    delete_expense(path, args.expense_id)
    print(f"Expense {args.expense_id} deleted.")
    return 0


# =============================================================================
# Main
# =============================================================================


COMMANDS = {
    "summary": cmd_summary,
    "vehicles": cmd_vehicles,
    "forecast": cmd_forecast,
    "pending": cmd_pending,
    "report": cmd_report,
    "detail": cmd_detail,
    "months": cmd_months,
    "lookup": cmd_lookup,
    "validate": cmd_validate,
    "init": cmd_init,
    "list-vehicles": cmd_list_vehicles,
    "add-vehicle": cmd_add_vehicle,
    "edit-vehicle": cmd_edit_vehicle,
    "delete-vehicle": cmd_delete_vehicle,
    "add-service": cmd_add_service,
    "edit-service": cmd_edit_service,
    "delete-service": cmd_delete_service,
    "pay": cmd_pay,
    "installments": cmd_installments,
    "add-expense": cmd_add_expense,
    "edit-expense": cmd_edit_expense,
    "delete-expense": cmd_delete_expense,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fleet financial dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s summary --month 2024-01
  %(prog)s vehicles
  %(prog)s forecast --today 2024-01-10
  %(prog)s pending --plate ABC1D23
  %(prog)s report 2024-01 --commission-rate 0.01
  %(prog)s detail ABC1D23 --search "locação" --from 2024-01-01
  %(prog)s lookup --os 1042
  %(prog)s add-service ABC1D23 "Construtora Alfa" 1500.00 --due 2024-02-10
  %(prog)s installments 12 3 --dry-run
  %(prog)s edit-service 12 --status Cancelado --note ""
  %(prog)s list-vehicles --search munck
""",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path(os.environ.get("FLEET_DATA_DIR", DEFAULT_DATA_DIR)),
        help="Directory with the table files (default: $FLEET_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug information",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    summary_parser = subparsers.add_parser("summary", help="Show dashboard totals")
    summary_parser.add_argument("--month", default="all", help="YYYY-MM or 'all' (default: all)")

    vehicles_parser = subparsers.add_parser("vehicles", help="Show totals per vehicle")
    vehicles_parser.add_argument("--month", default="all", help="YYYY-MM or 'all' (default: all)")

    forecast_parser = subparsers.add_parser("forecast", help="Show expected receipts")
    forecast_parser.add_argument("--today", help="Reference day YYYY-MM-DD (default: today)")

    pending_parser = subparsers.add_parser("pending", help="Show open services")
    pending_parser.add_argument("--month", default="all", help="YYYY-MM or 'all' (default: all)")
    pending_parser.add_argument("--plate", help="Only this vehicle (default: all)")
    pending_parser.add_argument("--today", help="Reference day YYYY-MM-DD (default: today)")

    report_parser = subparsers.add_parser("report", help="Show the monthly report")
    report_parser.add_argument("month", help="Month in YYYY-MM format")
    report_parser.add_argument(
        "--commission-rate",
        help="Commission as a fraction of gross revenue (default: from settings)",
    )

    detail_parser = subparsers.add_parser("detail", help="Show one vehicle's records")
    detail_parser.add_argument("plate", help="Vehicle plate")
    detail_parser.add_argument("--search", help="Case-insensitive text filter")
    detail_parser.add_argument("--from", dest="date_from", help="Issued on or after YYYY-MM-DD")
    detail_parser.add_argument("--to", dest="date_to", help="Issued on or before YYYY-MM-DD")
    detail_parser.add_argument(
        "--sort",
        choices=["issue_date", "due_date", "payment_date", "amount", "client", "vendor"],
        help="Sort field (records missing it go last)",
    )
    detail_parser.add_argument("--desc", action="store_true", help="Sort descending")

    subparsers.add_parser("months", help="List months with activity")

    lookup_parser = subparsers.add_parser("lookup", help="Find a vehicle by OS or NF")
    lookup_group = lookup_parser.add_mutually_exclusive_group(required=True)
    lookup_group.add_argument("--os", help="Order number")
    lookup_group.add_argument("--nf", help="Invoice number")

    subparsers.add_parser("validate", help="Validate the table files")

    init_parser = subparsers.add_parser("init", help="Create empty table files")
    init_parser.add_argument("--commission-rate", help="Write a settings file with this rate")

    vehicle_parser = subparsers.add_parser("add-vehicle", help="Register a vehicle")
    vehicle_parser.add_argument("plate", help="Vehicle plate")
    vehicle_parser.add_argument("--model", help="Vehicle model")
    vehicle_parser.add_argument("--year", type=int, help="Model year")
    vehicle_parser.add_argument(
        "--status",
        choices=[s.value for s in VehicleStatus],
        default=VehicleStatus.ACTIVE.value,
        help="Operational status (default: Ativo)",
    )

    list_parser = subparsers.add_parser("list-vehicles", help="List registered vehicles")
    list_parser.add_argument("--search", help="Match plate or model (case-insensitive)")

    edit_vehicle_parser = subparsers.add_parser("edit-vehicle", help="Change a vehicle")
    edit_vehicle_parser.add_argument("plate", help="Vehicle plate")
    edit_vehicle_parser.add_argument("--model", help="Vehicle model ('' clears it)")
    edit_vehicle_parser.add_argument("--year", type=int, help="Model year")
    edit_vehicle_parser.add_argument(
        "--status", choices=[s.value for s in VehicleStatus], help="Operational status"
    )

    delete_vehicle_parser = subparsers.add_parser(
        "delete-vehicle", help="Remove a vehicle (its records are kept)"
    )
    delete_vehicle_parser.add_argument("plate", help="Vehicle plate")

    service_parser = subparsers.add_parser("add-service", help="Record a service")
    service_parser.add_argument("plate", help="Vehicle plate")
    service_parser.add_argument("client", help="Client name")
    service_parser.add_argument("amount", help="Gross amount (1500.00 or 1.500,00)")
    service_parser.add_argument("--date", help="Issue date YYYY-MM-DD (default: today)")
    service_parser.add_argument("--due", help="Due date YYYY-MM-DD")
    service_parser.add_argument("--os", help="Order number")
    service_parser.add_argument("--nf", help="Invoice number")
    service_parser.add_argument("--boleto", help="Payment slip number")
    service_parser.add_argument("--operator", help="Crane operator")
    service_parser.add_argument("--note", help="Free-text note")
    service_parser.add_argument("--by", help="Who is recording it")
    service_parser.add_argument("--dry-run", action="store_true", help="Show without saving")

    edit_service_parser = subparsers.add_parser(
        "edit-service", help="Change fields of a service ('' clears a text or date)"
    )
    edit_service_parser.add_argument("service_id", type=int, help="Service id")
    edit_service_parser.add_argument("--client", help="Client name")
    edit_service_parser.add_argument("--plate", help="Vehicle plate")
    edit_service_parser.add_argument("--amount", help="Gross amount")
    edit_service_parser.add_argument("--date", help="Issue date YYYY-MM-DD")
    edit_service_parser.add_argument("--due", help="Due date YYYY-MM-DD")
    edit_service_parser.add_argument("--paid-on", dest="paid_on", help="Payment date YYYY-MM-DD")
    edit_service_parser.add_argument(
        "--status",
        choices=[s.value for s in ServiceStatus if s != ServiceStatus.UPCOMING],
        help="Stored status",
    )
    edit_service_parser.add_argument("--os", help="Order number")
    edit_service_parser.add_argument("--nf", help="Invoice number")
    edit_service_parser.add_argument("--boleto", help="Payment slip number")
    edit_service_parser.add_argument("--operator", help="Crane operator")
    edit_service_parser.add_argument("--note", help="Free-text note")

    delete_service_parser = subparsers.add_parser("delete-service", help="Remove a service")
    delete_service_parser.add_argument("service_id", type=int, help="Service id")

    pay_parser = subparsers.add_parser("pay", help="Mark a service as paid")
    pay_parser.add_argument("service_id", type=int, help="Service id")
    pay_parser.add_argument("--date", help="Payment date YYYY-MM-DD (default: today)")

    installments_parser = subparsers.add_parser(
        "installments", help="Split a service into monthly installments"
    )
    installments_parser.add_argument("service_id", type=int, help="Service id")
    installments_parser.add_argument("count", type=int, help="Number of installments (>= 2)")
    installments_parser.add_argument("--by", help="Who is splitting it")
    installments_parser.add_argument("--dry-run", action="store_true", help="Show without saving")

    expense_parser = subparsers.add_parser("add-expense", help="Record an expense")
    expense_parser.add_argument("plate", help="Vehicle plate")
    expense_parser.add_argument("amount", help="Total amount (350.00 or 350,00)")
    expense_parser.add_argument("--vendor", help="Vendor name")
    expense_parser.add_argument("--description", help="What was bought")
    expense_parser.add_argument("--date", help="Issue date YYYY-MM-DD (default: today)")
    expense_parser.add_argument("--due", help="Due date YYYY-MM-DD")
    expense_parser.add_argument("--note", help="Free-text note")
    expense_parser.add_argument("--by", help="Who is recording it")
    expense_parser.add_argument("--dry-run", action="store_true", help="Show without saving")

    edit_expense_parser = subparsers.add_parser(
        "edit-expense", help="Change fields of an expense ('' clears a text or date)"
    )
    edit_expense_parser.add_argument("expense_id", type=int, help="Expense id")
    edit_expense_parser.add_argument("--vendor", help="Vendor name")
    edit_expense_parser.add_argument("--description", help="What was bought")
    edit_expense_parser.add_argument("--plate", help="Vehicle plate")
    edit_expense_parser.add_argument("--amount", help="Total amount")
    edit_expense_parser.add_argument("--date", help="Issue date YYYY-MM-DD")
    edit_expense_parser.add_argument("--due", help="Due date YYYY-MM-DD")
    edit_expense_parser.add_argument("--note", help="Free-text note")

    delete_expense_parser = subparsers.add_parser("delete-expense", help="Remove an expense")
    delete_expense_parser.add_argument("expense_id", type=int, help="Expense id")

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        return COMMANDS[args.command](args)
    except LoadError as e:
        logger.debug("Load failure details: %s", e.details)
        print(f"Error: {e.message}")
        if e.details:
            print(f"  {e.details}")
        return 1
    except (ValueError, KeyError) as e:
        message = e.args[0] if e.args else str(e)
        print(f"Error: {message}")
        return 1
    except (OSError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
