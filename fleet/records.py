"""ServiceRecord and ExpenseRecord classes for billed work and costs."""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from .calculations import parse_local_date, to_decimal
from .status import ServiceStatus
from .vehicle import normalize_plate

Amount = Union[Decimal, int, float, str]


class ServiceRecord:
    """A billable unit of work performed for a client with one vehicle."""

    def __init__(
        self,
        id: Optional[int],
        client: str,
        plate: str,
        gross_amount: Amount,
        issue_date: Optional[str],
        due_date: Optional[str] = None,
        payment_date: Optional[str] = None,
        status: ServiceStatus = ServiceStatus.PENDING,
        note: Optional[str] = None,
        created_by: Optional[str] = None,
        order_number: Optional[str] = None,
        invoice_number: Optional[str] = None,
        operator: Optional[str] = None,
        boleto: Optional[str] = None,
    ):
        self.id = id
        self.client = client
        self.plate = normalize_plate(plate)
        self.gross_amount = to_decimal(gross_amount)
        self.issue_date = issue_date
        self.due_date = due_date
        self.payment_date = payment_date
        self.status = status
        self.note = note
        self.created_by = created_by
        # YAML reads unquoted numbers as int
        self.order_number = None if order_number is None else str(order_number)
        self.invoice_number = None if invoice_number is None else str(invoice_number)
        self.operator = operator
        self.boleto = None if boleto is None else str(boleto)

    @property
    def issued_on(self) -> Optional[date]:
        return parse_local_date(self.issue_date)

    @property
    def due_on(self) -> Optional[date]:
        return parse_local_date(self.due_date)


class ExpenseRecord:
    """A cost incurred against one vehicle. Expenses carry no status."""

    def __init__(
        self,
        id: Optional[int],
        vendor: Optional[str],
        description: Optional[str],
        plate: str,
        total_amount: Amount,
        issue_date: Optional[str],
        due_date: Optional[str] = None,
        note: Optional[str] = None,
        created_by: Optional[str] = None,
    ):
        self.id = id
        self.vendor = vendor
        self.description = description
        self.plate = normalize_plate(plate)
        self.total_amount = to_decimal(total_amount)
        self.issue_date = issue_date
        self.due_date = due_date
        self.note = note
        self.created_by = created_by

    @property
    def issued_on(self) -> Optional[date]:
        return parse_local_date(self.issue_date)

    @property
    def label(self) -> str:
        """Vendor, falling back to description."""
        return self.vendor or self.description or ""
