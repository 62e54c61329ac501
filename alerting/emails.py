"""HTML email bodies rendered from Jinja2 templates."""

from datetime import date
from typing import List, Optional, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape

from .alert import Alert, TankAlert
from .machine import Machine
from .messages import format_quantity, format_remaining
from .status import AlertStatus

env = Environment(
    loader=PackageLoader("alerting", "templates"),
    autoescape=select_autoescape(["html"]),
)


def status_color(status: AlertStatus) -> str:
    """Border/heading color for a status."""
    colors = {
        AlertStatus.RED: "#F44336",
        AlertStatus.YELLOW: "#FF9800",
        AlertStatus.GREEN: "#4CAF50",
    }
    return colors.get(status, "#999999")


def status_background(status: AlertStatus) -> str:
    colors = {
        AlertStatus.RED: "#FFEBEE",
        AlertStatus.YELLOW: "#FFF9C4",
        AlertStatus.GREEN: "#E8F5E9",
    }
    return colors.get(status, "#F9F9F9")


def status_text(status: AlertStatus) -> str:
    return "URGENT" if status is AlertStatus.RED else "ATTENTION"


# Register template filters
env.filters["quantity"] = format_quantity
env.filters["status_color"] = status_color
env.filters["status_background"] = status_background
env.filters["status_text"] = status_text


def tank_subject(alert: TankAlert) -> str:
    level = f"{format_quantity(alert.current_level, 'L')} ({alert.percentage_filled:.0f}%)"
    if alert.status is AlertStatus.RED:
        return f"URGENT: Fuel tank low - {level}"
    return f"Attention: Fuel tank - {level}"


def render_tank_email(user_name: str, alert: TankAlert, today: Optional[date] = None) -> str:
    template = env.get_template("tank_alert.html")
    return template.render(
        user_name=user_name,
        alert=alert,
        urgent=alert.status is AlertStatus.RED,
        year=(today or date.today()).year,
    )


def maintenance_subject(entries: List[Tuple[Alert, Machine]]) -> str:
    """Subject line counting urgent and attention items."""
    red = sum(1 for alert, _ in entries if alert.status is AlertStatus.RED)
    yellow = len(entries) - red
    counts = []
    if red:
        counts.append(f"{red} urgent")
    if yellow:
        counts.append(f"{yellow} attention")
    return f"{', '.join(counts)} - Maintenance alerts"


def render_maintenance_email(
    user_name: str, entries: List[Tuple[Alert, Machine]], today: Optional[date] = None
) -> str:
    """Consolidated email listing every collected maintenance alert."""
    rows = [
        {
            "status": alert.status,
            "machine": machine.name,
            "item": alert.item,
            "meter_label": machine.type.meter_label,
            "current": format_quantity(machine.current_meter, machine.type.meter_unit),
            "next_due": format_quantity(alert.next_due_meter, machine.type.meter_unit),
            "remaining": format_remaining(alert, machine),
        }
        for alert, machine in entries
    ]
    red = sum(1 for row in rows if row["status"] is AlertStatus.RED)
    template = env.get_template("maintenance_digest.html")
    return template.render(
        user_name=user_name,
        rows=rows,
        red_count=red,
        yellow_count=len(rows) - red,
        year=(today or date.today()).year,
    )
