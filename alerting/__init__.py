"""
Farm machinery maintenance alerts.

This package derives and notifies maintenance urgency:
- AlertStatus: Urgency levels (RED, YELLOW, GREEN)
- Machine / Maintenance / FarmTank: Records kept in a key-value store
- Alert / TankAlert: Derived urgency per maintenance item or fuel tank
- recalculate: Re-derive statuses as machine meters advance
- NotificationHistory: Once-per-day dedup of notifications
- AlertDispatcher / AlertMonitor: Push + daily email digest pipeline
"""

from .status import AlertStatus
from .machine import Machine, MachineType
from .maintenance import Maintenance
from .tank import FarmTank
from .alert import Alert, TankAlert
from .history_entry import NotifiedAlert
from .calculations import (
    calc_next_due,
    check_status,
    check_tank_status,
    build_alerts,
    tank_alert,
    summarize,
)
from .recalculation import recalculate, RecalculationResult
from .errors import AlertingError, StoreError, ConfigError
from .store import KeyValueStore, MemoryStore, YamlFileStore
from .repository import AlertRepository
from .history import NotificationHistory
from .dispatch import AlertDispatcher, DispatchReport, is_email_window
from .monitor import AlertMonitor, AppState
from .config import AlertConfig, load_config, build_monitor

__all__ = [
    "AlertStatus",
    "Machine",
    "MachineType",
    "Maintenance",
    "FarmTank",
    "Alert",
    "TankAlert",
    "NotifiedAlert",
    "calc_next_due",
    "check_status",
    "check_tank_status",
    "build_alerts",
    "tank_alert",
    "summarize",
    "recalculate",
    "RecalculationResult",
    "AlertingError",
    "StoreError",
    "ConfigError",
    "KeyValueStore",
    "MemoryStore",
    "YamlFileStore",
    "AlertRepository",
    "NotificationHistory",
    "AlertDispatcher",
    "DispatchReport",
    "is_email_window",
    "AlertMonitor",
    "AppState",
    "AlertConfig",
    "load_config",
    "build_monitor",
]
