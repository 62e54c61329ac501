"""Notification history: which alerts were already surfaced today."""

import logging
from datetime import datetime, tzinfo
from typing import Callable, List, Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .history_entry import NotifiedAlert
from .loader import dumps, loads
from .store import KeyValueStore

logger = logging.getLogger(__name__)

NOTIFIED_ALERTS_KEY = "notified_alerts"
DEFAULT_RETENTION_DAYS = 7


class NotificationHistory:
    """
    Daily dedup guard over a persisted list of (alert id, last notified at).

    "Today" is calendar-day equality in the given timezone, not a rolling
    24h window. Read-modify-write with no locking: one actor per store.
    """

    def __init__(
        self,
        store: KeyValueStore,
        tz: tzinfo,
        clock: Optional[Callable[[], datetime]] = None,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ):
        self.store = store
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(tz))
        self.retention_days = retention_days

    def entries(self) -> List[NotifiedAlert]:
        return loads(self.store.get(NOTIFIED_ALERTS_KEY)) or []

    def was_notified_today(self, alert_id: str) -> bool:
        """True when the alert was notified on the current local date."""
        try:
            entry = next((h for h in self.entries() if h.alert_id == alert_id), None)
            if entry is None:
                return False
            last = isoparse(entry.last_notified_at).astimezone(self.tz)
            return last.date() == self.clock().astimezone(self.tz).date()
        except Exception as e:
            logger.error(f"Cannot read notification history for {alert_id}: {e}")
            return False

    def mark_notified(self, alert_id: str) -> None:
        """Record the alert as notified now and drop entries past retention."""
        try:
            now = self.clock()
            history = [h for h in self.entries() if h.alert_id != alert_id]
            history.append(NotifiedAlert(alert_id, now.isoformat()))

            cutoff = now - relativedelta(days=self.retention_days)
            history = [h for h in history if self._is_after(h, cutoff)]

            self.store.set(NOTIFIED_ALERTS_KEY, dumps(history))
        except Exception as e:
            logger.error(f"Cannot mark alert {alert_id} as notified: {e}")

    def clear(self) -> None:
        self.store.remove(NOTIFIED_ALERTS_KEY)
        logger.info("Notification history cleared")

    @staticmethod
    def _is_after(entry: NotifiedAlert, cutoff: datetime) -> bool:
        try:
            return isoparse(entry.last_notified_at) > cutoff
        except (ValueError, TypeError):
            logger.warning(f"Dropping unreadable history entry for {entry.alert_id}")
            return False
