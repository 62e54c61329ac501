#!/usr/bin/env python3
"""Tests for AlertRepository."""

import pytest

from alerting import (
    Alert,
    AlertRepository,
    AlertStatus,
    FarmTank,
    Machine,
    MachineType,
    Maintenance,
    MemoryStore,
)
from alerting.loader import dumps


def oil_change(meter=1000, interval=250, maintenance_id="mt1", machine_id="tractor-1"):
    return Maintenance(
        maintenance_id,
        machine_id,
        meter,
        ["engine oil", "air filter"],
        [("engine oil", interval), ("air filter", 15)],
    )


class TestMachines:
    """Tests for machine reads and writes."""

    def test_save_and_get_machine(self, repository, tractor):
        repository.save_machine(tractor)
        machine = repository.get_machine("tractor-1")
        assert machine.model == "MF 4275"
        assert machine.created_at is not None
        assert machine.updated_at == machine.created_at

    def test_save_replaces_existing(self, repository, tractor):
        repository.save_machine(tractor)
        tractor.model = "MF 4292"
        repository.save_machine(tractor)
        assert [m.model for m in repository.machines()] == ["MF 4292"]

    def test_unknown_machine(self, repository):
        assert repository.get_machine("nope") is None
        with pytest.raises(KeyError):
            repository.update_meter("nope", 10)


class TestMaintenance:
    """Tests for maintenance records and alert creation."""

    def test_add_maintenance_creates_alerts(self, repository, tractor):
        repository.save_machine(tractor)
        created = repository.add_maintenance(oil_change())

        assert [a.id for a in created] == ["mt1-engine oil", "mt1-air filter"]
        assert [a.status for a in created] == [AlertStatus.GREEN, AlertStatus.YELLOW]
        assert len(repository.alerts()) == 2
        assert len(repository.maintenances()) == 1

    def test_add_maintenance_advances_machine_meter(self, repository, tractor):
        repository.save_machine(tractor)
        repository.add_maintenance(oil_change(meter=1000))
        assert repository.get_machine("tractor-1").current_meter == 1000

    def test_add_maintenance_unknown_machine_creates_no_alerts(self, repository):
        assert repository.add_maintenance(oil_change(machine_id="ghost")) == []
        assert repository.alerts() == []
        assert len(repository.maintenances()) == 1

    def test_delete_maintenance_cascades_alerts(self, repository, tractor):
        repository.save_machine(tractor)
        repository.add_maintenance(oil_change(maintenance_id="mt1"))
        repository.add_maintenance(oil_change(maintenance_id="mt2", meter=1100))

        repository.delete_maintenance("mt1")

        assert [m.id for m in repository.maintenances()] == ["mt2"]
        assert {a.maintenance_id for a in repository.alerts()} == {"mt2"}
        assert repository.get_machine("tractor-1") is not None

    def test_get_alerts_for_machine(self, repository, tractor):
        repository.save_machine(tractor)
        repository.add_maintenance(oil_change())
        assert len(repository.get_alerts_for_machine("tractor-1")) == 2
        assert repository.get_alerts_for_machine("other") == []


class TestRecalculateAlerts:
    """Tests for recalculate_alerts persistence."""

    def test_meter_update_recalculates(self, repository, tractor):
        repository.save_machine(tractor)
        repository.add_maintenance(oil_change(meter=1000, interval=250))

        repository.update_meter("tractor-1", 1240)
        statuses = {a.item: a.status for a in repository.alerts()}
        assert statuses == {"engine oil": AlertStatus.YELLOW, "air filter": AlertStatus.RED}

    def test_no_alerts_means_no_write(self):
        store = MemoryStore()
        repo = AlertRepository(store)
        result = repo.recalculate_alerts([Machine("m1", MachineType.TRACTOR, "MF", 10)])
        assert result.alerts == []
        assert store.writes == 0

    def test_second_pass_writes_nothing(self):
        """Only status changes are persisted, so a repeat pass is a no-op."""
        stale = Alert("mt1-oil", "m1", "mt1", "oil", 50, 50, 100, AlertStatus.GREEN)
        store = MemoryStore(
            {
                "machines": dumps([Machine("m1", MachineType.TRACTOR, "MF", 100)]),
                "alerts": dumps([stale]),
            }
        )
        repo = AlertRepository(store)

        first = repo.recalculate_alerts()
        assert first.changed == ["mt1-oil"]
        assert store.writes == 1

        second = repo.recalculate_alerts()
        assert second.changed == []
        assert store.writes == 1
        assert repo.alerts()[0].status == AlertStatus.RED


class TestTank:
    """Tests for fuel tank persistence."""

    def test_no_tank(self, repository):
        assert repository.tank() is None
        with pytest.raises(KeyError):
            repository.consume_fuel(10)

    def test_consume_fuel_clamps_at_zero(self, repository):
        repository.save_tank(FarmTank(capacity=1000, current_level=50, alert_level=100))
        tank = repository.consume_fuel(80)
        assert tank.current_level == 0
        assert repository.tank().current_level == 0

    def test_consume_fuel(self, repository, low_tank):
        low_tank.current_level = 600
        repository.save_tank(low_tank)
        repository.consume_fuel(100)
        assert repository.tank().current_level == 500
        assert repository.tank().fuel_type == "Diesel S10"
