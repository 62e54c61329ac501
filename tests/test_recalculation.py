#!/usr/bin/env python3
"""Tests for the alert recalculation pass."""

from alerting import Alert, AlertStatus, Machine, MachineType, recalculate


def make_alert(alert_id="mt1-oil", machine_id="m1", next_due=100, status=AlertStatus.GREEN):
    return Alert(
        id=alert_id,
        machine_id=machine_id,
        maintenance_id="mt1",
        item="oil",
        service_meter=next_due - 50,
        interval=50,
        next_due_meter=next_due,
        status=status,
    )


class TestRecalculate:
    """Tests for recalculate."""

    def test_updates_status_from_machine_meter(self):
        machines = [Machine("m1", MachineType.TRACTOR, "MF", 100)]
        result = recalculate([make_alert()], machines)
        assert result.alerts[0].status == AlertStatus.RED
        assert result.changed == ["mt1-oil"]
        assert result.has_changes

    def test_does_not_mutate_input(self):
        alert = make_alert()
        machines = [Machine("m1", MachineType.TRACTOR, "MF", 100)]
        recalculate([alert], machines)
        assert alert.status == AlertStatus.GREEN

    def test_unchanged_status_not_reported(self):
        machines = [Machine("m1", MachineType.TRACTOR, "MF", 70)]
        result = recalculate([make_alert()], machines)
        assert result.alerts[0].status == AlertStatus.GREEN
        assert not result.has_changes

    def test_missing_machine_leaves_alert_unchanged(self):
        """Orphan alerts are kept as they are, not purged."""
        alert = make_alert(machine_id="gone", status=AlertStatus.YELLOW)
        result = recalculate([alert], [])
        assert result.alerts == [alert]
        assert not result.has_changes

    def test_second_pass_is_idempotent(self):
        machines = [Machine("m1", MachineType.TRACTOR, "MF", 85)]
        first = recalculate([make_alert()], machines)
        second = recalculate(first.alerts, machines)
        assert first.changed == ["mt1-oil"]
        assert second.changed == []
        assert second.alerts[0].status == AlertStatus.YELLOW

    def test_mixed_alerts(self):
        machines = [
            Machine("m1", MachineType.TRACTOR, "MF", 100),
            Machine("m2", MachineType.TRUCK, "Volvo", 10),
        ]
        alerts = [
            make_alert("a", "m1", 100),
            make_alert("b", "m2", 100),
            make_alert("c", "m3", 100),
        ]
        result = recalculate(alerts, machines)
        assert [a.status for a in result.alerts] == [
            AlertStatus.RED,
            AlertStatus.GREEN,
            AlertStatus.GREEN,
        ]
        assert result.changed == ["a"]
