"""Maintenance record class."""
from typing import List, Optional, Tuple


class Maintenance:
    """A maintenance performed on a machine, with intervals to the next service."""

    def __init__(
            self,
            id: str,
            machine_id: str,
            meter: float,
            items: List[str],
            item_intervals: List[Tuple[str, float]],
            notes: Optional[str] = None,
            property_id: Optional[str] = None,
            created_at: Optional[str] = None,
    ):
        self.id = id
        self.machine_id = machine_id
        self.meter = meter
        self.items = items
        self.item_intervals = item_intervals
        self.notes = notes
        self.property_id = property_id
        self.created_at = created_at
