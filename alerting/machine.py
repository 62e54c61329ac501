"""Machine class and meter units per machine type."""

from enum import Enum
from typing import Optional


class MachineType(Enum):
    TRACTOR = "tractor"
    TRUCK = "truck"
    CAR = "car"
    LOADER = "loader"
    WAGON = "wagon"
    HARVESTER = "harvester"
    UNIPORT = "uniport"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def meter_label(self) -> str:
        """Name of the meter this machine type carries."""
        if self in (MachineType.TRUCK, MachineType.CAR):
            return "Odometer"
        if self is MachineType.WAGON:
            return "Counter"
        return "Hour meter"

    @property
    def meter_unit(self) -> str:
        """Short unit for meter readings (h, km or cycles)."""
        if self in (MachineType.TRUCK, MachineType.CAR):
            return "km"
        if self is MachineType.WAGON:
            return "cycles"
        return "h"


class Machine:
    """A piece of farm equipment and its running meter."""

    def __init__(
            self,
            id: str,
            type: MachineType,
            model: str,
            current_meter: float,
            property_id: Optional[str] = None,
            created_at: Optional[str] = None,
            updated_at: Optional[str] = None,
    ):
        self.id = id
        self.type = type
        self.model = model
        self.current_meter = current_meter
        self.property_id = property_id
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def name(self) -> str:
        """Human-readable machine name, e.g. '[Tractor] MF 4275'."""
        return f"[{self.type.label}] {self.model}"

    def format_meter(self, value: float, decimals: int = 0) -> str:
        """Format a meter value with this machine's unit."""
        return f"{value:,.{decimals}f}{self.type.meter_unit}"
