"""Alert dataclasses for maintenance and fuel tank urgency."""

from dataclasses import dataclass
from typing import Optional

from .status import AlertStatus

TANK_ALERT_ID = "tank"


@dataclass
class Alert:
    """Urgency of one maintenance item on one machine."""

    id: str
    machine_id: str
    maintenance_id: str
    item: str
    service_meter: float
    interval: float
    next_due_meter: float
    status: AlertStatus
    property_id: Optional[str] = None
    created_at: Optional[str] = None

    def remaining(self, current_meter: float) -> float:
        """Meter units left before the service is due (negative when overdue)."""
        return self.next_due_meter - current_meter

    @property
    def is_due(self) -> bool:
        return self.status.is_due


@dataclass
class TankAlert:
    """Urgency of the farm fuel tank level."""

    status: AlertStatus
    current_level: float
    capacity: float
    alert_level: float
    property_id: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def id(self) -> str:
        if self.property_id:
            return f"{TANK_ALERT_ID}-{self.property_id}"
        return TANK_ALERT_ID

    @property
    def percentage_filled(self) -> float:
        if not self.capacity:
            return 0.0
        return self.current_level / self.capacity * 100

    @property
    def is_due(self) -> bool:
        return self.status.is_due
