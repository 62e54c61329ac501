"""Exceptions raised by the alerting package."""


class AlertingError(Exception):
    """Base class for alerting errors."""


class StoreError(AlertingError):
    """Reading or writing the key-value store failed."""


class ConfigError(AlertingError):
    """The configuration file is missing, malformed or fails validation."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors or []
