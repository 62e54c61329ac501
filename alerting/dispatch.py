"""Push and daily-digest email dispatch for due alerts."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .alert import Alert, TankAlert
from .emails import (
    maintenance_subject,
    render_maintenance_email,
    render_tank_email,
    tank_subject,
)
from .history import NotificationHistory
from .machine import Machine
from .messages import maintenance_message, tank_message
from .senders import EmailSender, PushSender

logger = logging.getLogger(__name__)

DEFAULT_EMAIL_HOUR = 21


@dataclass
class DispatchReport:
    """What one dispatch pass did."""

    email_window_open: bool = False
    pushes_sent: int = 0
    push_failures: int = 0
    notified: List[str] = field(default_factory=list)
    emails_sent: List[Tuple[str, str]] = field(default_factory=list)  # (bucket, recipient)
    email_failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def tank_emails(self) -> int:
        return sum(1 for bucket, _ in self.emails_sent if bucket == "tank")

    @property
    def maintenance_emails(self) -> int:
        return sum(1 for bucket, _ in self.emails_sent if bucket == "maintenance")


def is_email_window(now: datetime, tz: tzinfo, hour: int = DEFAULT_EMAIL_HOUR) -> bool:
    """True when the local time in tz falls within the daily email hour."""
    return now.astimezone(tz).hour == hour


class AlertDispatcher:
    """
    Surfaces due alerts once per local day.

    Pushes fire as soon as an alert is found; emails are batched into one
    tank email and one maintenance digest, sent only inside the daily email
    hour unless forced. An alert counts as notified once it is pushed,
    whether or not its email goes out.
    """

    def __init__(
        self,
        history: NotificationHistory,
        push_sender: PushSender,
        email_sender: EmailSender,
        tz: tzinfo,
        clock: Optional[Callable[[], datetime]] = None,
        email_hour: int = DEFAULT_EMAIL_HOUR,
    ):
        self.history = history
        self.push_sender = push_sender
        self.email_sender = email_sender
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(tz))
        self.email_hour = email_hour

    def dispatch(
        self,
        alerts: Iterable[Alert],
        machines: Iterable[Machine],
        tank: Optional[TankAlert] = None,
        recipients: Optional[List[str]] = None,
        user_name: str = "",
        force_email: bool = False,
    ) -> DispatchReport:
        """Notify every red/yellow alert not yet notified today."""
        report = DispatchReport()
        machines_by_id: Dict[str, Machine] = {m.id: m for m in machines}
        tank_bucket: List[TankAlert] = []
        maintenance_bucket: List[Tuple[Alert, Machine]] = []

        if tank is not None and tank.is_due and not self.history.was_notified_today(tank.id):
            title, body = tank_message(tank)
            self._push(report, title, body, {"alertId": tank.id, "type": "tank_alert"})
            tank_bucket.append(tank)
            self._mark(report, tank.id)

        for alert in alerts:
            if not alert.is_due:
                continue
            if self.history.was_notified_today(alert.id):
                logger.debug(f"Alert {alert.id} already notified today")
                continue
            machine = machines_by_id.get(alert.machine_id)
            if machine is None:
                logger.debug(f"Skipping alert {alert.id}: machine {alert.machine_id} not found")
                continue

            title, body = maintenance_message(alert, machine)
            data = {
                "alertId": alert.id,
                "machineId": machine.id,
                "type": f"{alert.status.value}_alert",
            }
            self._push(report, title, body, data)
            maintenance_bucket.append((alert, machine))
            self._mark(report, alert.id)

        report.email_window_open = is_email_window(self.clock(), self.tz, self.email_hour)
        if not (report.email_window_open or force_email):
            if tank_bucket or maintenance_bucket:
                logger.info("Outside the daily email hour, emails not sent")
            return report
        if not recipients:
            logger.warning("No recipient email configured, emails not sent")
            return report

        today = self.clock().astimezone(self.tz).date()
        if tank_bucket:
            # One tank per property: only the first collected tank alert is mailed
            tank_alert = tank_bucket[0]
            self._email_all(
                report,
                "tank",
                recipients,
                tank_subject(tank_alert),
                render_tank_email(user_name, tank_alert, today),
            )
        if maintenance_bucket:
            self._email_all(
                report,
                "maintenance",
                recipients,
                maintenance_subject(maintenance_bucket),
                render_maintenance_email(user_name, maintenance_bucket, today),
            )
        return report

    def _push(self, report: DispatchReport, title: str, body: str, data: dict) -> None:
        try:
            self.push_sender.send(title, body, data)
            report.pushes_sent += 1
        except Exception as e:
            report.push_failures += 1
            logger.error(f"Push for alert {data.get('alertId')} failed: {e}")

    def _mark(self, report: DispatchReport, alert_id: str) -> None:
        self.history.mark_notified(alert_id)
        report.notified.append(alert_id)

    def _email_all(
        self,
        report: DispatchReport,
        bucket: str,
        recipients: List[str],
        subject: str,
        html: str,
    ) -> None:
        for recipient in recipients:
            try:
                sent = self.email_sender.send(recipient, subject, html)
            except Exception as e:
                logger.error(f"Sending {bucket} email to {recipient} failed: {e}")
                sent = False
            if sent:
                report.emails_sent.append((bucket, recipient))
            else:
                report.email_failures.append((bucket, recipient))
