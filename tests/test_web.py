#!/usr/bin/env python3
"""Tests for the Flask alert endpoints."""

import pytest

from alerting import (
    AlertConfig,
    FarmTank,
    Machine,
    MachineType,
    Maintenance,
    MemoryStore,
    build_monitor,
)
from conftest import RecordingEmailSender, RecordingPushSender
from web.app import app


@pytest.fixture
def outbox():
    return RecordingEmailSender()


@pytest.fixture
def client(clock, outbox):
    monitor = build_monitor(
        AlertConfig(recipients=["manager@farm.com"], user_name="Ana"),
        store=MemoryStore(),
        push_sender=RecordingPushSender(),
        email_sender=outbox,
        clock=clock,
    )
    repo = monitor.repository
    repo.save_machine(Machine("tractor-1", MachineType.TRACTOR, "MF 4275", 100))
    repo.add_maintenance(
        Maintenance(
            "mt1",
            "tractor-1",
            100,
            ["engine oil", "grease"],
            [("engine oil", 250), ("grease", 0)],
        )
    )
    repo.save_tank(FarmTank(1000, 100, 150, "Diesel S10"))

    app.config["TESTING"] = True
    app.config["MONITOR"] = monitor
    with app.test_client() as client:
        yield client
    app.config.pop("MONITOR", None)


class TestAlertsEndpoint:
    """Tests for GET /alerts."""

    def test_lists_alerts(self, client):
        response = client.get("/alerts")
        assert response.status_code == 200
        data = response.get_json()
        ids = {a["id"]: a["status"] for a in data["alerts"]}
        assert ids == {"mt1-engine oil": "green", "mt1-grease": "red"}
        assert data["summary"] == "1 urgent, 1 OK"

    def test_includes_tank(self, client):
        tank = client.get("/alerts").get_json()["tank"]
        assert tank["status"] == "red"
        assert tank["currentLevel"] == 100
        assert tank["percentageFilled"] == 10.0


class TestCheckEndpoint:
    """Tests for POST /check."""

    def test_check_outside_email_hour(self, client, outbox):
        data = client.post("/check").get_json()
        assert data["emailWindowOpen"] is False
        assert data["pushesSent"] == 2
        assert data["maintenanceEmails"] == 0
        assert outbox.sent == []

    def test_check_forcing_email(self, client, outbox):
        data = client.post("/check?email=true").get_json()
        assert data["tankEmails"] == 1
        assert data["maintenanceEmails"] == 1
        assert sorted(data["notified"]) == ["mt1-grease", "tank"]
        assert len(outbox.sent) == 2

    def test_get_not_allowed(self, client):
        assert client.get("/check").status_code == 405

    def test_disabled_monitor_unavailable(self, client):
        app.config["MONITOR"].set_enabled(False)
        response = client.post("/check")
        assert response.status_code == 503


class TestAppSetup:
    """Tests for the Flask app configuration."""

    def test_no_session_secret(self):
        assert app.secret_key is None
