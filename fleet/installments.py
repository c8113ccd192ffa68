"""Split one service into monthly installments."""

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .calculations import parse_local_date
from .records import ServiceRecord
from .status import ServiceStatus

CENT = Decimal("0.01")


def split_into_installments(
    service: ServiceRecord, count: int, created_by: Optional[str] = None
) -> List[ServiceRecord]:
    """
    Build ``count`` pending services replacing ``service``.

    Each installment is gross / count rounded to cents; the last one absorbs
    the rounding difference so the installments add up to the original gross.
    Due dates advance one calendar month per installment from the original
    due date. New records have no id; the store assigns them.
    """
    if count < 2:
        raise ValueError("An installment plan needs at least 2 installments")
    if not service.gross_amount:
        raise ValueError("Service has no gross amount to split")
    first_due = parse_local_date(service.due_date)
    if first_due is None:
        raise ValueError("Service needs a valid due date to be split")

    share = (service.gross_amount / count).quantize(CENT, rounding=ROUND_HALF_UP)
    amounts = [share] * count
    amounts[-1] = share + (service.gross_amount - share * count)

    base_order = service.order_number or "S/N"
    installments = []
    for i, amount in enumerate(amounts):
        n = i + 1
        note = f"Parcela {n}/{count} do serviço original ID {service.id}. {service.note or ''}"
        installments.append(
            ServiceRecord(
                id=None,
                client=service.client,
                plate=service.plate,
                gross_amount=amount,
                issue_date=service.issue_date,
                due_date=(first_due + relativedelta(months=i)).isoformat(),
                payment_date=None,
                status=ServiceStatus.PENDING,
                note=note.strip(),
                created_by=created_by if created_by is not None else service.created_by,
                order_number=f"{base_order} ({n}/{count})",
                invoice_number=service.invoice_number,
                boleto=service.boleto,
                operator=service.operator,
            )
        )
    return installments
