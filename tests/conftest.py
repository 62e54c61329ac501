"""Shared fixtures: a controllable clock, recording senders and sample data."""

from datetime import datetime, timedelta

import pytest
from dateutil import tz

from alerting import (
    AlertDispatcher,
    AlertRepository,
    FarmTank,
    Machine,
    MachineType,
    MemoryStore,
    NotificationHistory,
)

SAO_PAULO = tz.gettz("America/Sao_Paulo")


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingPushSender:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send(self, title, body, data=None):
        if self.fail:
            raise RuntimeError("push service unavailable")
        self.sent.append((title, body, data))


class RecordingEmailSender:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to, subject, html):
        if to in self.fail_for:
            raise RuntimeError(f"mailbox {to} unavailable")
        self.sent.append((to, subject, html))
        return True


@pytest.fixture
def clock():
    """10:00 local time, outside the daily email hour."""
    return FixedClock(datetime(2025, 3, 10, 10, 0, tzinfo=SAO_PAULO))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def push_sender():
    return RecordingPushSender()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def history(store, clock):
    return NotificationHistory(store, SAO_PAULO, clock)


@pytest.fixture
def dispatcher(history, push_sender, email_sender, clock):
    return AlertDispatcher(history, push_sender, email_sender, SAO_PAULO, clock)


@pytest.fixture
def repository(store, clock):
    return AlertRepository(store, clock)


@pytest.fixture
def tractor():
    return Machine("tractor-1", MachineType.TRACTOR, "MF 4275", 100)


@pytest.fixture
def low_tank():
    return FarmTank(capacity=1000, current_level=100, alert_level=150, fuel_type="Diesel S10")
