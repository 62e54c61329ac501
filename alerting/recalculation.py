"""Re-derive maintenance alert statuses after machine meters change."""

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List

from .alert import Alert
from .calculations import check_status
from .machine import Machine


@dataclass
class RecalculationResult:
    """Alerts after a recalculation pass and the ids whose status changed."""

    alerts: List[Alert]
    changed: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed)


def recalculate(alerts: List[Alert], machines: Iterable[Machine]) -> RecalculationResult:
    """
    Recompute every alert's status from its machine's current meter.

    Alerts whose machine no longer exists are returned unchanged; purging
    them belongs to maintenance/machine deletion. Input alerts are not
    mutated: changed alerts are replaced by updated copies.
    """
    by_id: Dict[str, Machine] = {m.id: m for m in machines}
    updated = []
    changed = []
    for alert in alerts:
        machine = by_id.get(alert.machine_id)
        if machine is None:
            updated.append(alert)
            continue

        status = check_status(machine.current_meter, alert.next_due_meter)
        if status is alert.status:
            updated.append(alert)
        else:
            updated.append(replace(alert, status=status))
            changed.append(alert.id)

    return RecalculationResult(alerts=updated, changed=changed)
