"""JSON loading and dumping of app records (camelCase keys)."""

import json
from typing import Any, Dict, List, Optional, Union

from .alert import Alert
from .history_entry import NotifiedAlert
from .machine import Machine, MachineType
from .maintenance import Maintenance
from .status import AlertStatus
from .tank import FarmTank

Record = Union[Machine, Maintenance, Alert, FarmTank, NotifiedAlert]


def _parse_object(dct: Dict[str, Any]) -> Union[Record, tuple, dict]:
    """Parse dictionary into appropriate object type."""
    # Alert (checked before item intervals, it also has item/interval)
    if "nextDueMeter" in dct:
        return Alert(
            dct["id"],
            dct["machineId"],
            dct["maintenanceId"],
            dct["item"],
            dct["serviceMeter"],
            dct["interval"],
            dct["nextDueMeter"],
            AlertStatus(dct["status"]),
            dct.get("propertyId"),
            dct.get("createdAt"),
        )
    # Item interval pair inside a maintenance record
    elif "item" in dct and "interval" in dct:
        return (dct["item"], dct["interval"])
    elif "currentMeter" in dct and "type" in dct:
        return Machine(
            dct["id"],
            MachineType(dct["type"]),
            dct.get("model", ""),
            dct["currentMeter"],
            dct.get("propertyId"),
            dct.get("createdAt"),
            dct.get("updatedAt"),
        )
    elif "itemIntervals" in dct:
        return Maintenance(
            dct["id"],
            dct["machineId"],
            dct["meter"],
            dct.get("items") or [],
            dct["itemIntervals"],
            dct.get("notes"),
            dct.get("propertyId"),
            dct.get("createdAt"),
        )
    elif "capacity" in dct and "alertLevel" in dct:
        return FarmTank(
            dct["capacity"],
            dct["currentLevel"],
            dct["alertLevel"],
            dct.get("fuelType"),
            dct.get("propertyId"),
        )
    elif "alertId" in dct:
        return NotifiedAlert(dct["alertId"], dct["lastNotifiedAt"])
    else:
        return dct


def loads(text: Optional[str]) -> Any:
    """Parse a stored JSON document into record objects."""
    if not text:
        return None
    return json.loads(text, object_hook=_parse_object)


def _without_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def to_dict(record: Record) -> Dict[str, Any]:
    """Serialize a record to its stored dict format."""
    if isinstance(record, Alert):
        return _without_none(
            {
                "id": record.id,
                "machineId": record.machine_id,
                "maintenanceId": record.maintenance_id,
                "item": record.item,
                "serviceMeter": record.service_meter,
                "interval": record.interval,
                "nextDueMeter": record.next_due_meter,
                "status": record.status.value,
                "propertyId": record.property_id,
                "createdAt": record.created_at,
            }
        )
    if isinstance(record, Machine):
        return _without_none(
            {
                "id": record.id,
                "type": record.type.value,
                "model": record.model,
                "currentMeter": record.current_meter,
                "propertyId": record.property_id,
                "createdAt": record.created_at,
                "updatedAt": record.updated_at,
            }
        )
    if isinstance(record, Maintenance):
        return _without_none(
            {
                "id": record.id,
                "machineId": record.machine_id,
                "meter": record.meter,
                "items": list(record.items),
                "itemIntervals": [
                    {"item": item, "interval": interval}
                    for item, interval in record.item_intervals
                ],
                "notes": record.notes,
                "propertyId": record.property_id,
                "createdAt": record.created_at,
            }
        )
    if isinstance(record, FarmTank):
        return _without_none(
            {
                "capacity": record.capacity,
                "currentLevel": record.current_level,
                "alertLevel": record.alert_level,
                "fuelType": record.fuel_type,
                "propertyId": record.property_id,
            }
        )
    if isinstance(record, NotifiedAlert):
        return {"alertId": record.alert_id, "lastNotifiedAt": record.last_notified_at}
    raise TypeError(f"Cannot serialize {type(record).__name__}")


def dumps(records: Union[Record, List[Record]]) -> str:
    """Serialize a record or list of records to a JSON string."""
    if isinstance(records, list):
        return json.dumps([to_dict(r) for r in records])
    return json.dumps(to_dict(records))
