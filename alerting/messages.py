"""Human-readable notification text for alerts."""

from typing import Optional, Tuple

from .alert import Alert, TankAlert
from .machine import Machine
from .status import AlertStatus


def format_quantity(value: Optional[float], unit: str) -> str:
    """Format a meter or volume value with its unit, e.g. '1,250 h' or '0.4 h'."""
    if value is None:
        return "-"
    if 0 < abs(value) < 1:
        return f"{value:.1f} {unit}"
    return f"{value:,.0f} {unit}"


def format_remaining(alert: Alert, machine: Machine) -> str:
    """Describe the margin left: 'N <unit> overdue', 'due now' or 'N <unit> remaining'."""
    remaining = alert.remaining(machine.current_meter)
    unit = machine.type.meter_unit
    if remaining < 0:
        return f"{format_quantity(abs(remaining), unit)} overdue"
    if remaining == 0:
        return "due now"
    return f"{format_quantity(remaining, unit)} remaining"


def maintenance_message(alert: Alert, machine: Machine) -> Tuple[str, str]:
    """Push title and body for a maintenance alert."""
    if alert.status is AlertStatus.RED:
        title = "Urgent maintenance"
    else:
        title = "Maintenance due soon"
    body = f"{machine.name}: {alert.item} {format_remaining(alert, machine)}"
    return title, body


def tank_message(alert: TankAlert) -> Tuple[str, str]:
    """Push title and body for the fuel tank alert."""
    if alert.status is AlertStatus.RED:
        title = "Fuel tank low"
    else:
        title = "Fuel tank attention"
    body = (
        f"Fuel tank at {format_quantity(alert.current_level, 'L')} "
        f"of {format_quantity(alert.capacity, 'L')} "
        f"(alert level {format_quantity(alert.alert_level, 'L')})"
    )
    return title, body
