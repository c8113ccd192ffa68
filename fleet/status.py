"""Status enums for service payment and vehicle operation."""

from enum import Enum


class ServiceStatus(Enum):
    """Payment lifecycle of a service. UPCOMING is derived, never stored."""

    PENDING = "Pendente"
    PAID = "Pago"
    OVERDUE = "Vencido"
    CANCELED = "Cancelado"
    UPCOMING = "a Vencer"

    @classmethod
    def from_stored(cls, value: str) -> "ServiceStatus":
        """Look up a stored status string. Derived-only values are rejected."""
        status = cls(value)
        if status == cls.UPCOMING:
            raise ValueError(f"{value!r} is not a storable service status")
        return status


class VehicleStatus(Enum):
    """Operational status of a vehicle."""

    ACTIVE = "Ativo"
    INACTIVE = "Inativo"
    MAINTENANCE = "Manutenção"


# Stored statuses counted as money still to be received
RECEIVABLE = frozenset({ServiceStatus.PENDING, ServiceStatus.OVERDUE})

# Effective statuses shown in the pending services list
OPEN = frozenset({ServiceStatus.PENDING, ServiceStatus.UPCOMING, ServiceStatus.OVERDUE})

# Effective statuses that enter the receipt forecast
FORECASTABLE = frozenset({ServiceStatus.PENDING, ServiceStatus.UPCOMING})
