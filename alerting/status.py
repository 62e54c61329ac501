"""Status enum for alert urgency levels."""

from enum import Enum


class AlertStatus(Enum):
    """Alert status categories, stored by their lowercase color name."""

    RED = "red"  # Due or overdue
    YELLOW = "yellow"
    GREEN = "green"

    @property
    def urgency(self) -> int:
        """Lower value = more urgent."""
        return _URGENCY[self]

    @property
    def is_due(self) -> bool:
        return self in (AlertStatus.RED, AlertStatus.YELLOW)


_URGENCY = {AlertStatus.RED: 1, AlertStatus.YELLOW: 2, AlertStatus.GREEN: 3}
