"""Helper functions for alert status calculations."""

from datetime import datetime
from typing import List, Optional

from .alert import Alert, TankAlert
from .machine import Machine
from .maintenance import Maintenance
from .status import AlertStatus
from .tank import FarmTank

# Meter units left at which a maintenance alert turns yellow
DUE_SOON_MARGIN = 20
# Fraction above the tank alert level at which the tank turns yellow
TANK_DUE_SOON_FACTOR = 1.1


def calc_next_due(service_meter: float, interval: float) -> float:
    """Calculate next due meter: service meter + interval."""
    return service_meter + interval


def check_status(current_meter: float, next_due_meter: float) -> AlertStatus:
    """
    Determine status from the margin left before the next service.

    - remaining > 20: GREEN
    - 0 < remaining <= 20: YELLOW
    - remaining <= 0: RED (due now or overdue)
    """
    remaining = next_due_meter - current_meter
    if remaining > DUE_SOON_MARGIN:
        return AlertStatus.GREEN
    if remaining > 0:
        return AlertStatus.YELLOW
    return AlertStatus.RED


def check_tank_status(current_level: float, alert_level: float) -> AlertStatus:
    """Determine tank status: RED at or below the alert level, YELLOW within 10% above it."""
    if current_level <= alert_level:
        return AlertStatus.RED
    if current_level <= alert_level * TANK_DUE_SOON_FACTOR:
        return AlertStatus.YELLOW
    return AlertStatus.GREEN


def build_alerts(
    maintenance: Maintenance, machine: Machine, now: Optional[datetime] = None
) -> List[Alert]:
    """
    Create one alert per item interval of a maintenance record.

    Status is computed against the machine's current meter, which callers
    are expected to have advanced to the maintenance meter already.
    """
    created_at = now.isoformat() if now else None
    alerts = []
    for item, interval in maintenance.item_intervals:
        next_due = calc_next_due(maintenance.meter, interval)
        alerts.append(
            Alert(
                id=f"{maintenance.id}-{item}",
                machine_id=machine.id,
                maintenance_id=maintenance.id,
                item=item,
                service_meter=maintenance.meter,
                interval=interval,
                next_due_meter=next_due,
                status=check_status(machine.current_meter, next_due),
                property_id=maintenance.property_id,
                created_at=created_at,
            )
        )
    return alerts


def tank_alert(tank: FarmTank, now: Optional[datetime] = None) -> TankAlert:
    """Derive the tank alert from the tank's level and alert threshold."""
    return TankAlert(
        status=check_tank_status(tank.current_level, tank.alert_level),
        current_level=tank.current_level,
        capacity=tank.capacity,
        alert_level=tank.alert_level,
        property_id=tank.property_id,
        created_at=now.isoformat() if now else None,
    )


def summarize(statuses: List[AlertStatus]) -> str:
    """Summarize alert counts, e.g. '2 urgent, 1 attention, 3 OK'."""
    red = sum(1 for s in statuses if s is AlertStatus.RED)
    yellow = sum(1 for s in statuses if s is AlertStatus.YELLOW)
    green = sum(1 for s in statuses if s is AlertStatus.GREEN)

    parts = []
    if red:
        parts.append(f"{red} urgent")
    if yellow:
        parts.append(f"{yellow} attention")
    if green:
        parts.append(f"{green} OK")
    return ", ".join(parts) or "No alerts"
