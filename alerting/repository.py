"""Read-through access to the app data persisted in a key-value store."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .alert import Alert
from .calculations import build_alerts
from .loader import dumps, loads
from .machine import Machine
from .maintenance import Maintenance
from .recalculation import RecalculationResult, recalculate
from .store import KeyValueStore
from .tank import FarmTank

logger = logging.getLogger(__name__)

MACHINES_KEY = "machines"
MAINTENANCES_KEY = "maintenances"
ALERTS_KEY = "alerts"
FARM_TANK_KEY = "farm_tank"


class AlertRepository:
    """
    Machines, maintenance records, alerts and the fuel tank.

    Every read goes to the store, so the store stays the single source of
    truth and nothing here is cached between calls.
    """

    def __init__(self, store: KeyValueStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or (lambda: datetime.now().astimezone())

    def _read_list(self, key: str) -> list:
        return loads(self.store.get(key)) or []

    def machines(self) -> List[Machine]:
        return self._read_list(MACHINES_KEY)

    def maintenances(self) -> List[Maintenance]:
        return self._read_list(MAINTENANCES_KEY)

    def alerts(self) -> List[Alert]:
        return self._read_list(ALERTS_KEY)

    def tank(self) -> Optional[FarmTank]:
        return loads(self.store.get(FARM_TANK_KEY))

    def get_machine(self, machine_id: str) -> Optional[Machine]:
        for machine in self.machines():
            if machine.id == machine_id:
                return machine
        return None

    def get_alerts_for_machine(self, machine_id: str) -> List[Alert]:
        return [a for a in self.alerts() if a.machine_id == machine_id]

    def save_alerts(self, alerts: List[Alert]) -> None:
        self.store.set(ALERTS_KEY, dumps(alerts))

    def save_machine(self, machine: Machine) -> None:
        """Insert or replace a machine, then bring alert statuses up to date."""
        machine.updated_at = self.clock().isoformat()
        if machine.created_at is None:
            machine.created_at = machine.updated_at
        machines = [m for m in self.machines() if m.id != machine.id]
        machines.append(machine)
        self.store.set(MACHINES_KEY, dumps(machines))
        self.recalculate_alerts(machines)

    def update_meter(self, machine_id: str, meter: float) -> Machine:
        """Set a machine's current meter and recalculate alert statuses."""
        machine = self.get_machine(machine_id)
        if machine is None:
            raise KeyError(f"Unknown machine '{machine_id}'")
        machine.current_meter = meter
        self.save_machine(machine)
        return machine

    def recalculate_alerts(
        self, machines: Optional[List[Machine]] = None
    ) -> RecalculationResult:
        """
        Re-derive alert statuses from current machine meters.

        Writes the alerts back only when at least one status changed, so
        running it again with unchanged meters writes nothing.
        """
        alerts = self.alerts()
        if not alerts:
            return RecalculationResult(alerts=[])
        if machines is None:
            machines = self.machines()

        result = recalculate(alerts, machines)
        if result.has_changes:
            logger.info(f"Alert status changed for {len(result.changed)} alert(s)")
            self.save_alerts(result.alerts)
        return result

    def add_maintenance(self, maintenance: Maintenance) -> List[Alert]:
        """
        Record a maintenance, advance the machine meter and create its alerts.

        Returns the alerts created for the record (none if the machine is unknown).
        """
        now = self.clock()
        if maintenance.created_at is None:
            maintenance.created_at = now.isoformat()
        maintenances = self.maintenances()
        maintenances.append(maintenance)
        self.store.set(MAINTENANCES_KEY, dumps(maintenances))

        machine = self.get_machine(maintenance.machine_id)
        if machine is None:
            logger.warning(
                f"Maintenance {maintenance.id} references unknown machine "
                f"'{maintenance.machine_id}', no alerts created"
            )
            return []

        machine.current_meter = maintenance.meter
        self.save_machine(machine)

        new_alerts = build_alerts(maintenance, machine, now)
        self.save_alerts(self.alerts() + new_alerts)
        return new_alerts

    def delete_maintenance(self, maintenance_id: str) -> None:
        """Remove a maintenance record together with its alerts."""
        maintenances = [m for m in self.maintenances() if m.id != maintenance_id]
        self.store.set(MAINTENANCES_KEY, dumps(maintenances))
        alerts = [a for a in self.alerts() if a.maintenance_id != maintenance_id]
        self.save_alerts(alerts)

    def save_tank(self, tank: FarmTank) -> None:
        self.store.set(FARM_TANK_KEY, dumps(tank))

    def consume_fuel(self, liters: float) -> FarmTank:
        """Withdraw fuel from the tank, never going below empty."""
        tank = self.tank()
        if tank is None:
            raise KeyError("Farm tank is not configured")
        tank.current_level = max(tank.current_level - liters, 0)
        self.save_tank(tank)
        if tank.current_level <= tank.alert_level:
            logger.warning(f"Fuel tank low: {tank.current_level:,.0f} L left")
        return tank
