"""Periodic, lifecycle-triggered alert checks."""

import logging
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Union

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .calculations import tank_alert
from .dispatch import AlertDispatcher, DispatchReport
from .repository import AlertRepository

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL = timedelta(minutes=30)
DEFAULT_MIN_GAP = timedelta(minutes=5)
CHECK_JOB_ID = "alert_check"


class AppState(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


class AlertMonitor:
    """
    Runs alert checks on foreground transitions, on a timer while active,
    and on demand.

    Checks closer together than min_gap are skipped. The last-check
    timestamp is claimed with a compare-and-set under a lock, so two
    triggers landing in the same tick cannot both run. Only one check runs
    at a time: a trigger arriving while another check is still dispatching
    is skipped, forced or not.
    """

    def __init__(
        self,
        repository: AlertRepository,
        dispatcher: AlertDispatcher,
        recipients: Optional[List[str]] = None,
        user_name: str = "",
        clock: Optional[Callable[[], datetime]] = None,
        check_interval: timedelta = DEFAULT_CHECK_INTERVAL,
        min_gap: timedelta = DEFAULT_MIN_GAP,
        enabled: bool = True,
    ):
        self.repository = repository
        self.dispatcher = dispatcher
        self.recipients = recipients or []
        self.user_name = user_name
        self.clock = clock or dispatcher.clock
        self.check_interval = check_interval
        self.min_gap = min_gap
        self.enabled = enabled
        self.app_state = AppState.ACTIVE
        self._last_check: Optional[datetime] = None
        self._lock = threading.Lock()
        self._in_progress = threading.Lock()
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def last_check(self) -> Optional[datetime]:
        return self._last_check

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        logger.info(f"Alert notifications {'enabled' if enabled else 'disabled'}")

    def _claim(self, now: datetime, ignore_gap: bool) -> bool:
        """Atomically take the check slot if the minimum gap has passed."""
        with self._lock:
            if (
                not ignore_gap
                and self._last_check is not None
                and now - self._last_check < self.min_gap
            ):
                return False
            self._last_check = now
            return True

    def check(self, force_email: bool = False, ignore_gap: bool = False) -> Optional[DispatchReport]:
        """
        Evaluate all current alerts and dispatch notifications.

        Returns None when the check was skipped. Failures are logged and
        never raised.
        """
        if not self.enabled:
            logger.debug("Notifications disabled, check skipped")
            return None
        if not self._in_progress.acquire(blocking=False):
            logger.debug("Check skipped, another one is still running")
            return None
        try:
            return self._run_check(force_email, ignore_gap)
        finally:
            self._in_progress.release()

    def _run_check(self, force_email: bool, ignore_gap: bool) -> Optional[DispatchReport]:
        now = self.clock()
        if not self._claim(now, ignore_gap):
            logger.debug("Check skipped, last one was too recent")
            return None

        try:
            alerts = self.repository.recalculate_alerts().alerts
            machines = self.repository.machines()
            tank = self.repository.tank()
            logger.info(f"Checking {len(alerts)} alert(s)")
            report = self.dispatcher.dispatch(
                alerts,
                machines,
                tank=tank_alert(tank, now) if tank else None,
                recipients=self.recipients,
                user_name=self.user_name,
                force_email=force_email,
            )
        except Exception as e:
            logger.error(f"Alert check failed: {e}")
            return None

        logger.info(
            f"Check done: {report.pushes_sent} push(es), "
            f"{len(report.emails_sent)} email(s) sent"
        )
        return report

    def force_check(self, force_email: bool = False) -> Optional[DispatchReport]:
        """Check now regardless of the minimum gap."""
        return self.check(force_email=force_email, ignore_gap=True)

    def on_app_state_change(self, next_state: Union[AppState, str]) -> Optional[DispatchReport]:
        """Check when the app comes back to the foreground."""
        next_state = AppState(next_state)
        previous, self.app_state = self.app_state, next_state
        if previous in (AppState.INACTIVE, AppState.BACKGROUND) and next_state is AppState.ACTIVE:
            return self.check()
        return None

    def on_timer(self) -> Optional[DispatchReport]:
        """Interval tick: only checks while the app is in the foreground."""
        if self.app_state is not AppState.ACTIVE:
            return None
        return self.check()

    def start(self) -> None:
        """Check immediately, then every check_interval until stopped."""
        if self._scheduler is not None:
            logger.debug("Alert monitor already running")
            return
        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self.on_timer,
            trigger=IntervalTrigger(seconds=self.check_interval.total_seconds()),
            id=CHECK_JOB_ID,
            name="Check maintenance alerts",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"Alert monitor started, checking every {self.check_interval}")
        self.check()

    def stop(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Alert monitor stopped")
