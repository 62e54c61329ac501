"""YAML configuration, validated against config_schema.yaml."""

import os
from datetime import datetime, timedelta, tzinfo
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml
from dateutil import tz
from jsonschema import Draft7Validator

from .dispatch import DEFAULT_EMAIL_HOUR, AlertDispatcher
from .errors import ConfigError
from .history import DEFAULT_RETENTION_DAYS, NotificationHistory
from .monitor import AlertMonitor
from .repository import AlertRepository
from .senders import (
    EXPO_PUSH_URL,
    RESEND_API_URL,
    EmailSender,
    ExpoPushSender,
    LogEmailSender,
    LogPushSender,
    PushSender,
    ResendEmailSender,
)
from .store import KeyValueStore, YamlFileStore

DEFAULT_TIMEZONE = "America/Sao_Paulo"
DEFAULT_SENDER = "Machine maintenance <alerts@example.com>"


def load_schema() -> dict:
    """Load the JSON schema from config_schema.yaml."""
    schema_path = Path(__file__).parent / "config_schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def validate_config(data: Any, schema: Optional[dict] = None) -> List[str]:
    """Validate parsed config data. Returns list of errors."""
    validator = Draft7Validator(schema or load_schema())
    errors = []
    ordered = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    for error in ordered:
        message = f"Schema validation error: {error.message}"
        if error.path:
            message += f" (at path: {'.'.join(str(p) for p in error.path)})"
        errors.append(message)
    return errors


class AlertConfig:
    """Settings for the alert monitor."""

    def __init__(
            self,
            timezone: str = DEFAULT_TIMEZONE,
            email_hour: int = DEFAULT_EMAIL_HOUR,
            check_interval_minutes: float = 30,
            min_check_gap_minutes: float = 5,
            history_retention_days: int = DEFAULT_RETENTION_DAYS,
            data_file: Optional[str] = None,
            user_name: str = "",
            recipients: Optional[List[str]] = None,
            email: Optional[Dict[str, Any]] = None,
            push: Optional[Dict[str, Any]] = None,
    ):
        self.timezone = timezone
        self.email_hour = email_hour
        self.check_interval = timedelta(minutes=check_interval_minutes)
        self.min_check_gap = timedelta(minutes=min_check_gap_minutes)
        self.history_retention_days = history_retention_days
        self.data_file = data_file
        self.user_name = user_name
        self.recipients = recipients or []
        self.email = email or {"provider": "log"}
        self.push = push or {"provider": "log"}

    @property
    def tz(self) -> tzinfo:
        zone = tz.gettz(self.timezone)
        if zone is None:
            raise ConfigError(f"Unknown timezone '{self.timezone}'")
        return zone

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AlertConfig":
        return cls(
            data.get("timezone", DEFAULT_TIMEZONE),
            data.get("emailHour", DEFAULT_EMAIL_HOUR),
            data.get("checkIntervalMinutes", 30),
            data.get("minCheckGapMinutes", 5),
            data.get("historyRetentionDays", DEFAULT_RETENTION_DAYS),
            data.get("dataFile"),
            data.get("userName", ""),
            data.get("recipients"),
            data.get("email"),
            data.get("push"),
        )


def load_config(filename: Union[str, Path]) -> AlertConfig:
    """Load and validate a configuration file."""
    path = Path(filename)
    try:
        with open(path) as fp:
            data = yaml.safe_load(fp) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parse error in {path}: {e}") from e

    errors = validate_config(data)
    if errors:
        raise ConfigError(f"Invalid configuration in {path}", errors)

    config = AlertConfig.from_dict(data)
    # Relative data files live next to the config file
    if config.data_file and not Path(config.data_file).is_absolute():
        config.data_file = str(path.parent / config.data_file)
    if tz.gettz(config.timezone) is None:
        raise ConfigError(f"Unknown timezone '{config.timezone}'")
    return config


def build_push_sender(config: AlertConfig) -> PushSender:
    if config.push.get("provider") == "expo":
        return ExpoPushSender(
            config.push.get("tokens") or [],
            url=config.push.get("apiUrl", EXPO_PUSH_URL),
        )
    return LogPushSender()


def build_email_sender(config: AlertConfig) -> EmailSender:
    if config.email.get("provider") == "resend":
        api_key = os.environ.get("RESEND_API_KEY")
        if not api_key:
            raise ConfigError("RESEND_API_KEY is not set")
        return ResendEmailSender(
            api_key,
            config.email.get("from", DEFAULT_SENDER),
            url=config.email.get("apiUrl", RESEND_API_URL),
        )
    return LogEmailSender()


def build_monitor(
    config: AlertConfig,
    store: Optional[KeyValueStore] = None,
    push_sender: Optional[PushSender] = None,
    email_sender: Optional[EmailSender] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> AlertMonitor:
    """Wire store, history, senders and dispatcher into a monitor."""
    zone = config.tz
    if store is None:
        if not config.data_file:
            raise ConfigError("No dataFile configured")
        store = YamlFileStore(config.data_file)
    clock = clock or (lambda: datetime.now(zone))

    history = NotificationHistory(store, zone, clock, config.history_retention_days)
    dispatcher = AlertDispatcher(
        history,
        push_sender or build_push_sender(config),
        email_sender or build_email_sender(config),
        zone,
        clock,
        config.email_hour,
    )
    return AlertMonitor(
        AlertRepository(store, clock),
        dispatcher,
        recipients=config.recipients,
        user_name=config.user_name,
        clock=clock,
        check_interval=config.check_interval,
        min_gap=config.min_check_gap,
    )
