"""YAML loading and saving utilities for the fleet tables."""

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .records import ExpenseRecord, ServiceRecord
from .settings import Settings
from .status import ServiceStatus, VehicleStatus
from .vehicle import Vehicle, normalize_plate

logger = logging.getLogger(__name__)

VEHICLES_FILE = "vehicles.yaml"
SERVICES_FILE = "services.yaml"
EXPENSES_FILE = "expenses.yaml"
SETTINGS_FILE = "settings.yaml"

PathLike = Union[str, Path]


def _parse_object(dct: Dict[str, Any]) -> Union[ServiceRecord, ExpenseRecord, Vehicle, dict]:
    """Parse dictionary into appropriate object type."""
    # Service row
    if "grossAmount" in dct:
        return ServiceRecord(
            dct.get("id"),
            dct.get("client"),
            dct["plate"],
            dct["grossAmount"],
            dct.get("issueDate"),
            dct.get("dueDate"),
            dct.get("paymentDate"),
            ServiceStatus.from_stored(dct.get("status") or ServiceStatus.PENDING.value),
            dct.get("note"),
            dct.get("createdBy"),
            dct.get("orderNumber"),
            dct.get("invoiceNumber"),
            dct.get("operator"),
            dct.get("boleto"),
        )
    # Expense row
    elif "totalAmount" in dct:
        return ExpenseRecord(
            dct.get("id"),
            dct.get("vendor"),
            dct.get("description"),
            dct["plate"],
            dct["totalAmount"],
            dct.get("issueDate"),
            dct.get("dueDate"),
            dct.get("note"),
            dct.get("createdBy"),
        )
    # Vehicle row
    elif "plate" in dct:
        return Vehicle(
            dct["plate"],
            dct.get("model"),
            dct.get("year"),
            VehicleStatus(dct.get("status") or VehicleStatus.ACTIVE.value),
        )
    else:
        # Return dict as-is for table wrappers and settings
        return dct


def _load(filename: PathLike) -> Any:
    """Load a table file into parsed objects. Dates come back as strings."""
    with open(filename, "rb") as fp:
        json_data = json.dumps(yaml.load(fp, Loader=yaml.SafeLoader), default=str)
        return json.loads(json_data, object_hook=_parse_object, parse_float=Decimal)


def _load_table(filename: PathLike, table: str) -> list:
    data = _load(filename) or {}
    rows = data.get(table) or []
    logger.debug("Loaded %d %s from %s", len(rows), table, filename)
    return rows


def load_vehicles(filename: PathLike) -> List[Vehicle]:
    """Load the vehicle table."""
    return _load_table(filename, "vehicles")


def load_services(filename: PathLike) -> List[ServiceRecord]:
    """Load the service table."""
    return _load_table(filename, "services")


def load_expenses(filename: PathLike) -> List[ExpenseRecord]:
    """Load the expense table."""
    return _load_table(filename, "expenses")


def load_settings(filename: PathLike) -> Settings:
    """Load settings, falling back to defaults when the file is absent."""
    if not Path(filename).exists():
        return Settings()
    data = _load(filename) or {}
    kwargs: Dict[str, Any] = {}
    if data.get("commissionRate") is not None:
        kwargs["commission_rate"] = data["commissionRate"]
    if data.get("timezone"):
        kwargs["timezone"] = data["timezone"]
    return Settings(**kwargs)


# =============================================================================
# Serialization
# =============================================================================


def _amount(value: Decimal) -> Union[int, float]:
    """Plain YAML number for a Decimal amount."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    """Serialize a Vehicle to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {"plate": vehicle.plate}
    if vehicle.model is not None:
        d["model"] = vehicle.model
    if vehicle.year is not None:
        d["year"] = vehicle.year
    d["status"] = vehicle.status.value
    return d


def _service_to_dict(service: ServiceRecord) -> Dict[str, Any]:
    """Serialize a ServiceRecord, omitting None values for cleaner YAML."""
    d: Dict[str, Any] = {
        "id": service.id,
        "client": service.client,
        "plate": service.plate,
        "grossAmount": _amount(service.gross_amount),
        "issueDate": service.issue_date,
        "dueDate": service.due_date,
        "paymentDate": service.payment_date,
        "status": service.status.value,
        "orderNumber": service.order_number,
        "invoiceNumber": service.invoice_number,
        "operator": service.operator,
        "boleto": service.boleto,
        "note": service.note,
        "createdBy": service.created_by,
    }
    return {k: v for k, v in d.items() if v is not None}


def _expense_to_dict(expense: ExpenseRecord) -> Dict[str, Any]:
    """Serialize an ExpenseRecord, omitting None values for cleaner YAML."""
    d: Dict[str, Any] = {
        "id": expense.id,
        "vendor": expense.vendor,
        "description": expense.description,
        "plate": expense.plate,
        "totalAmount": _amount(expense.total_amount),
        "issueDate": expense.issue_date,
        "dueDate": expense.due_date,
        "note": expense.note,
        "createdBy": expense.created_by,
    }
    return {k: v for k, v in d.items() if v is not None}


def _read_raw(filename: PathLike, table: str) -> Dict[str, Any]:
    """Load the raw YAML data (not parsed into objects)."""
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
    if data.get(table) is None:
        data[table] = []
    return data


def _write_raw(filename: PathLike, data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _index_of(rows: List[Dict[str, Any]], key: str, value: Any) -> int:
    for i, row in enumerate(rows):
        if row.get(key) == value:
            return i
    raise KeyError(f"No row with {key} {value!r}")


def _next_id(rows: List[Dict[str, Any]]) -> int:
    ids = [row["id"] for row in rows if isinstance(row.get("id"), int)]
    return max(ids, default=0) + 1


# =============================================================================
# Vehicles
# =============================================================================


def add_vehicle(filename: PathLike, vehicle: Vehicle) -> None:
    """Append a vehicle. Plates are unique."""
    data = _read_raw(filename, "vehicles")
    plates = {normalize_plate(row.get("plate")) for row in data["vehicles"]}
    if vehicle.plate in plates:
        raise ValueError(f"Vehicle {vehicle.plate} already exists")
    data["vehicles"].append(_vehicle_to_dict(vehicle))
    _write_raw(filename, data)


def update_vehicle(filename: PathLike, plate: str, vehicle: Vehicle) -> None:
    """Replace the vehicle with the given plate."""
    data = _read_raw(filename, "vehicles")
    rows = data["vehicles"]
    for row in rows:
        row["plate"] = normalize_plate(row.get("plate"))
    index = _index_of(rows, "plate", normalize_plate(plate))
    rows[index] = _vehicle_to_dict(vehicle)
    _write_raw(filename, data)


def delete_vehicle(filename: PathLike, plate: str) -> None:
    """Remove the vehicle with the given plate. Its records are kept."""
    data = _read_raw(filename, "vehicles")
    rows = data["vehicles"]
    for row in rows:
        row["plate"] = normalize_plate(row.get("plate"))
    del rows[_index_of(rows, "plate", normalize_plate(plate))]
    _write_raw(filename, data)


# =============================================================================
# Services
# =============================================================================


def add_service(filename: PathLike, service: ServiceRecord) -> int:
    """Append a service, assigning the next id. Returns the id."""
    data = _read_raw(filename, "services")
    service_id = _next_id(data["services"])
    row = _service_to_dict(service)
    row["id"] = service_id
    data["services"].append(row)
    _write_raw(filename, data)
    logger.info("Added service %d for %s", service_id, service.plate)
    return service_id


def update_service(filename: PathLike, service: ServiceRecord) -> None:
    """Replace the stored service that has the same id."""
    data = _read_raw(filename, "services")
    rows = data["services"]
    rows[_index_of(rows, "id", service.id)] = _service_to_dict(service)
    _write_raw(filename, data)


def delete_service(filename: PathLike, service_id: int) -> None:
    """Remove a service by id."""
    data = _read_raw(filename, "services")
    rows = data["services"]
    del rows[_index_of(rows, "id", service_id)]
    _write_raw(filename, data)


def replace_service_with_installments(
    filename: PathLike, service_id: int, installments: List[ServiceRecord]
) -> List[int]:
    """
    Remove a service and append its installments in a single write.

    Returns the ids assigned to the installments.
    """
    data = _read_raw(filename, "services")
    rows = data["services"]
    del rows[_index_of(rows, "id", service_id)]

    next_id = _next_id(rows)
    # Never reuse the removed id
    next_id = max(next_id, service_id + 1)
    ids = []
    for offset, installment in enumerate(installments):
        row = _service_to_dict(installment)
        row["id"] = next_id + offset
        rows.append(row)
        ids.append(row["id"])
    _write_raw(filename, data)
    logger.info("Split service %d into %d installments", service_id, len(ids))
    return ids


# =============================================================================
# Expenses
# =============================================================================


def add_expense(filename: PathLike, expense: ExpenseRecord) -> int:
    """Append an expense, assigning the next id. Returns the id."""
    data = _read_raw(filename, "expenses")
    expense_id = _next_id(data["expenses"])
    row = _expense_to_dict(expense)
    row["id"] = expense_id
    data["expenses"].append(row)
    _write_raw(filename, data)
    logger.info("Added expense %d for %s", expense_id, expense.plate)
    return expense_id


def update_expense(filename: PathLike, expense: ExpenseRecord) -> None:
    """Replace the stored expense that has the same id."""
    data = _read_raw(filename, "expenses")
    rows = data["expenses"]
    rows[_index_of(rows, "id", expense.id)] = _expense_to_dict(expense)
    _write_raw(filename, data)


def delete_expense(filename: PathLike, expense_id: int) -> None:
    """Remove an expense by id."""
    data = _read_raw(filename, "expenses")
    rows = data["expenses"]
    del rows[_index_of(rows, "id", expense_id)]
    _write_raw(filename, data)


# =============================================================================
# Data directory
# =============================================================================


def create_tables(
    data_dir: PathLike, commission_rate: Optional[Decimal] = None
) -> None:
    """
    Create empty table files in a data directory.

    Existing tables are left untouched.
    """
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    for name, table in (
        (VEHICLES_FILE, "vehicles"),
        (SERVICES_FILE, "services"),
        (EXPENSES_FILE, "expenses"),
    ):
        path = data_dir / name
        if not path.exists():
            _write_raw(path, {table: []})
    settings_path = data_dir / SETTINGS_FILE
    if commission_rate is not None and not settings_path.exists():
        _write_raw(settings_path, {"commissionRate": _amount(Decimal(str(commission_rate)))})
