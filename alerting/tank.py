"""FarmTank class for on-farm fuel storage."""
from typing import Optional


class FarmTank:
    """The property's fuel tank and its configured alert level."""

    def __init__(
            self,
            capacity: float,
            current_level: float,
            alert_level: float,
            fuel_type: Optional[str] = None,
            property_id: Optional[str] = None,
    ):
        self.capacity = capacity
        self.current_level = current_level
        self.alert_level = alert_level
        self.fuel_type = fuel_type
        self.property_id = property_id
