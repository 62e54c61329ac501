#!/usr/bin/env python3
"""
Unified CLI for machine maintenance alerts.

Commands:
  status        - Show maintenance alerts grouped by urgency
  recalc        - Re-derive alert statuses from current machine meters
  check         - Run an alert check now (push + daily email)
  history       - View notification history
  clear-history - Forget which alerts were already notified
  meter         - Update a machine's current meter
  machine       - Register (add) a machine
  maintenance   - Record (add) or remove (delete) a maintenance and its alerts
  tank          - Configure (set) or draw fuel from (consume) the farm tank
"""

import argparse
import logging
import sys
from pathlib import Path
from tabulate import tabulate
from typing import Dict, List, Optional, Tuple

from alerting import (
    Alert,
    AlertStatus,
    ConfigError,
    FarmTank,
    Machine,
    MachineType,
    Maintenance,
    build_monitor,
    calc_next_due,
    load_config,
    summarize,
    tank_alert,
)
from alerting.messages import format_quantity, format_remaining

# =============================================================================
# Formatting helpers
# =============================================================================


def format_meter(value: Optional[float], machine: Optional[Machine]) -> str:
    """Format a meter reading with the machine's unit."""
    if machine is None:
        return "-" if value is None else f"{value:,.0f}"
    return format_quantity(value, machine.type.meter_unit)


def make_alert_table(
    alerts: List[Alert], machines: Dict[str, Machine]
) -> List[List[str]]:
    """Convert alerts to table rows."""
    rows = []
    for alert in alerts:
        machine = machines.get(alert.machine_id)
        rows.append(
            [
                machine.name if machine else f"(missing {alert.machine_id})",
                alert.item,
                format_meter(machine.current_meter if machine else None, machine),
                format_meter(alert.next_due_meter, machine),
                format_remaining(alert, machine) if machine else "-",
            ]
        )
    return rows


def print_tank(tank: FarmTank) -> None:
    t = tank_alert(tank)
    print(
        f"Fuel tank: {format_quantity(t.current_level, 'L')} of "
        f"{format_quantity(t.capacity, 'L')} ({t.status.value.upper()})"
    )


def print_unknown_machine(repo, machine_id: str) -> None:
    print(f"Error: Unknown machine '{machine_id}'")
    print("\nAvailable machines:")
    for m in sorted(repo.machines(), key=lambda m: m.id):
        print(f"  {m.id}: {m.name}")


# =============================================================================
# Commands
# =============================================================================


def cmd_status(args, monitor):
    """Show maintenance alerts grouped by urgency."""
    repo = monitor.repository
    machines = {m.id: m for m in repo.machines()}
    alerts = repo.alerts()

    print(f"Machines: {len(machines)}")
    print(f"Alerts: {summarize([a.status for a in alerts])}")
    tank = repo.tank()
    if tank is not None:
        print_tank(tank)
    print()

    headers = ["Machine", "Item", "Current", "Next due", "Remaining"]
    for status, label in (
        (AlertStatus.RED, "RED (due or overdue)"),
        (AlertStatus.YELLOW, "YELLOW (due soon)"),
        (AlertStatus.GREEN, "GREEN"),
    ):
        group = sorted(
            [a for a in alerts if a.status is status],
            key=lambda a: (a.machine_id, a.item),
        )
        if group:
            print(f"{label}:")
            print(tabulate(make_alert_table(group, machines), headers=headers, tablefmt="simple"))
            print()

    return 0


def cmd_recalc(args, monitor):
    """Re-derive alert statuses from current machine meters."""
    result = monitor.repository.recalculate_alerts()
    if not result.has_changes:
        print("No status changes.")
        return 0
    print(f"Updated {len(result.changed)} alert(s):")
    for alert_id in result.changed:
        print(f"  {alert_id}")
    return 0


def cmd_check(args, monitor):
    """Run an alert check now."""
    report = monitor.force_check(force_email=args.send_email)
    if report is None:
        print("Check did not run (see log).")
        return 1

    print(f"Push notifications: {report.pushes_sent}")
    if report.push_failures:
        print(f"Push failures: {report.push_failures}")
    print(f"Tank emails: {report.tank_emails}")
    print(f"Maintenance emails: {report.maintenance_emails}")
    if report.email_failures:
        print(f"Email failures: {len(report.email_failures)}")
    if not (report.email_window_open or args.send_email):
        print("(outside the daily email hour - use --send-email to force)")
    return 0


def cmd_history(args, monitor):
    """View notification history."""
    entries = monitor.dispatcher.history.entries()
    if not entries:
        print("No notification history.")
        return 0
    rows = [[e.alert_id, e.last_notified_at] for e in entries]
    print(tabulate(rows, headers=["Alert", "Last notified"], tablefmt="simple"))
    return 0


def cmd_clear_history(args, monitor):
    """Forget which alerts were already notified."""
    monitor.dispatcher.history.clear()
    print("Notification history cleared.")
    return 0


def cmd_meter(args, monitor):
    """Update a machine's current meter."""
    repo = monitor.repository
    machine = repo.get_machine(args.machine_id)
    if machine is None:
        print_unknown_machine(repo, args.machine_id)
        return 1

    print(f"Machine: {machine.name}")
    print(f"Current {machine.type.meter_label.lower()}: {format_meter(machine.current_meter, machine)}")
    print(f"New {machine.type.meter_label.lower()}:     {format_meter(args.value, machine)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    repo.update_meter(machine.id, args.value)
    print("Meter updated.")
    return 0


def cmd_machine_add(args, monitor):
    """Register a machine."""
    repo = monitor.repository
    if repo.get_machine(args.machine_id) is not None:
        print(f"Error: Machine '{args.machine_id}' already exists")
        return 1
    machine = Machine(args.machine_id, MachineType(args.type), args.model, args.meter)
    repo.save_machine(machine)
    print(f"Added {machine.id}: {machine.name} at {format_meter(machine.current_meter, machine)}")
    return 0


def parse_item_interval(text: str) -> Tuple[str, float]:
    """Parse an 'ITEM=INTERVAL' argument, e.g. 'engine oil=250'."""
    item, sep, interval = text.rpartition("=")
    item = item.strip()
    if not sep or not item:
        raise argparse.ArgumentTypeError(f"expected ITEM=INTERVAL, got '{text}'")
    try:
        value = float(interval)
    except ValueError:
        raise argparse.ArgumentTypeError(f"interval for '{item}' is not a number: '{interval}'")
    if value < 0:
        raise argparse.ArgumentTypeError(f"interval for '{item}' must not be negative")
    return item, value


def cmd_maintenance_add(args, monitor):
    """Record a maintenance and create its alerts."""
    repo = monitor.repository
    machine = repo.get_machine(args.machine_id)
    if machine is None:
        print_unknown_machine(repo, args.machine_id)
        return 1

    maintenance_id = args.id or f"mt-{monitor.clock():%Y%m%d%H%M%S}"
    if any(m.id == maintenance_id for m in repo.maintenances()):
        print(f"Error: Maintenance '{maintenance_id}' already exists")
        return 1

    print(f"Adding maintenance {maintenance_id} to {machine.name}:")
    print(f"  {machine.type.meter_label}: {format_meter(args.meter, machine)}")
    for item, interval in args.items:
        print(
            f"  {item}: every {format_meter(interval, machine)} "
            f"(next due {format_meter(calc_next_due(args.meter, interval), machine)})"
        )
    if args.notes:
        print(f"  Notes: {args.notes}")
    if args.meter < machine.current_meter:
        print(
            f"Warning: meter is below the current reading "
            f"({format_meter(machine.current_meter, machine)})"
        )
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    maintenance = Maintenance(
        id=maintenance_id,
        machine_id=machine.id,
        meter=args.meter,
        items=[item for item, _ in args.items],
        item_intervals=list(args.items),
        notes=args.notes,
        property_id=machine.property_id,
    )
    created = repo.add_maintenance(maintenance)
    print(f"Maintenance saved. {len(created)} alert(s) created:")
    for alert in created:
        print(f"  {alert.id}: {alert.status.value.upper()}")
    return 0


def cmd_maintenance_delete(args, monitor):
    """Delete a maintenance together with its alerts."""
    repo = monitor.repository
    if not any(m.id == args.maintenance_id for m in repo.maintenances()):
        print(f"Error: Unknown maintenance '{args.maintenance_id}'")
        return 1

    alert_count = sum(1 for a in repo.alerts() if a.maintenance_id == args.maintenance_id)
    repo.delete_maintenance(args.maintenance_id)
    print(f"Deleted maintenance {args.maintenance_id} and {alert_count} alert(s).")
    return 0


def cmd_tank_set(args, monitor):
    """Configure the farm fuel tank."""
    if args.level > args.capacity:
        print("Error: Level cannot exceed capacity")
        return 1
    tank = FarmTank(
        capacity=args.capacity,
        current_level=args.level,
        alert_level=args.alert_level,
        fuel_type=args.fuel_type,
    )
    monitor.repository.save_tank(tank)
    print_tank(tank)
    return 0


def cmd_tank_consume(args, monitor):
    """Withdraw fuel from the farm tank."""
    try:
        tank = monitor.repository.consume_fuel(args.liters)
    except KeyError:
        print("Error: No fuel tank configured (use 'tank set' first)")
        return 1
    print_tank(tank)
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Machine maintenance alerts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s farm.yaml status
  %(prog)s farm.yaml recalc
  %(prog)s farm.yaml check --send-email
  %(prog)s farm.yaml meter tractor-1 1250
  %(prog)s farm.yaml machine add tractor-1 tractor "MF 4275" 1200
  %(prog)s farm.yaml maintenance add tractor-1 1250 --item "engine oil=250" --item "fuel filter=500"
  %(prog)s farm.yaml maintenance delete mt-20250310100000
  %(prog)s farm.yaml tank set 5000 3200 800 --fuel-type "Diesel S10"
  %(prog)s farm.yaml tank consume 120
  %(prog)s farm.yaml history
""",
    )
    parser.add_argument(
        "config_file",
        type=Path,
        help="Path to configuration YAML file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show maintenance alerts grouped by urgency")
    subparsers.add_parser("recalc", help="Re-derive alert statuses from machine meters")

    check_parser = subparsers.add_parser("check", help="Run an alert check now")
    check_parser.add_argument(
        "--send-email",
        action="store_true",
        help="Send emails even outside the daily email hour",
    )

    subparsers.add_parser("history", help="View notification history")
    subparsers.add_parser("clear-history", help="Forget which alerts were notified")

    meter_parser = subparsers.add_parser("meter", help="Update a machine's current meter")
    meter_parser.add_argument("machine_id", type=str, help="Machine id")
    meter_parser.add_argument("value", type=float, help="Current meter reading")
    meter_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without saving",
    )

    machine_parser = subparsers.add_parser("machine", help="Register machines")
    machine_actions = machine_parser.add_subparsers(dest="action", required=True)

    machine_add_parser = machine_actions.add_parser("add", help="Register a machine")
    machine_add_parser.add_argument("machine_id", type=str, help="Machine id")
    machine_add_parser.add_argument(
        "type",
        choices=[t.value for t in MachineType],
        help="Machine type",
    )
    machine_add_parser.add_argument("model", type=str, help="Model, e.g. 'MF 4275'")
    machine_add_parser.add_argument("meter", type=float, help="Current meter reading")

    maint_parser = subparsers.add_parser("maintenance", help="Add or delete maintenance records")
    maint_actions = maint_parser.add_subparsers(dest="action", required=True)

    add_parser = maint_actions.add_parser("add", help="Record a maintenance and create its alerts")
    add_parser.add_argument("machine_id", type=str, help="Machine id")
    add_parser.add_argument("meter", type=float, help="Meter reading at the service")
    add_parser.add_argument(
        "--item",
        dest="items",
        action="append",
        required=True,
        type=parse_item_interval,
        metavar="ITEM=INTERVAL",
        help="Serviced item and the interval to its next service (repeatable)",
    )
    add_parser.add_argument("--id", type=str, help="Maintenance id (default: from the time)")
    add_parser.add_argument("--notes", type=str, help="Notes")
    add_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    delete_parser = maint_actions.add_parser("delete", help="Delete a maintenance and its alerts")
    delete_parser.add_argument("maintenance_id", type=str, help="Maintenance id")

    tank_parser = subparsers.add_parser("tank", help="Manage the farm fuel tank")
    tank_actions = tank_parser.add_subparsers(dest="action", required=True)

    set_parser = tank_actions.add_parser("set", help="Configure the fuel tank")
    set_parser.add_argument("capacity", type=float, help="Capacity in liters")
    set_parser.add_argument("level", type=float, help="Current level in liters")
    set_parser.add_argument("alert_level", type=float, help="Alert level in liters")
    set_parser.add_argument("--fuel-type", type=str, help="Fuel type")

    consume_parser = tank_actions.add_parser("consume", help="Withdraw fuel from the tank")
    consume_parser.add_argument("liters", type=float, help="Liters withdrawn")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Validate config file exists
    if not args.config_file.exists():
        print(f"Error: File not found: {args.config_file}")
        return 1

    try:
        config = load_config(args.config_file)
        monitor = build_monitor(config)
    except ConfigError as e:
        print(f"Error: {e}")
        for error in e.errors:
            print(f"  {error}")
        return 1

    # Dispatch to command handler
    handlers = {
        "status": cmd_status,
        "recalc": cmd_recalc,
        "check": cmd_check,
        "history": cmd_history,
        "clear-history": cmd_clear_history,
        "meter": cmd_meter,
        "machine add": cmd_machine_add,
        "maintenance add": cmd_maintenance_add,
        "maintenance delete": cmd_maintenance_delete,
        "tank set": cmd_tank_set,
        "tank consume": cmd_tank_consume,
    }
    key = args.command
    if getattr(args, "action", None):
        key = f"{args.command} {args.action}"
    return handlers[key](args, monitor)


if __name__ == "__main__":
    sys.exit(main() or 0)
