"""Vehicle class for fleet identification."""

from typing import Optional

from .status import VehicleStatus


def normalize_plate(plate: Optional[str]) -> str:
    """Plates are compared stripped and upper-cased."""
    return (plate or "").strip().upper()


class Vehicle:
    """A fleet vehicle. The plate is the grouping key for all aggregation."""

    def __init__(
        self,
        plate: str,
        model: Optional[str] = None,
        year: Optional[int] = None,
        status: VehicleStatus = VehicleStatus.ACTIVE,
    ):
        self.plate = normalize_plate(plate)
        self.model = model
        self.year = year
        self.status = status

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        parts = [self.plate]
        if self.model:
            parts.append(self.model)
        if self.year:
            parts.append(f"({self.year})")
        return " ".join(parts)
