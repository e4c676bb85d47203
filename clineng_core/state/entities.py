# =============================================================================
# clineng_core/state/entities.py
# Domain entities: equipment, customers, suppliers and service records
# =============================================================================
"""
Typed entities shared by the Entity Store, the Persistence Mirror and the
remote API client.

Wire format:
-----------
Outgoing payloads use camelCase keys (``serialNumber``, ``customerId``...).
Incoming payloads may also carry the database column names returned by the
backend's ``get_all`` action (``serial_number``, ``customer_id``...), so
``from_dict`` accepts either spelling.
"""

from __future__ import annotations
import secrets
import string
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMERATIONS
# =============================================================================

class EquipmentStatus(str, Enum):
    """Workflow status of a piece of equipment. Transitions are not enforced."""
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    READY = "Ready"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def color(self) -> str:
        return STATUS_COLORS[self]

    @classmethod
    def parse(cls, value: Any) -> EquipmentStatus:
        """
        Resolve a status from its value, member name, display label or the
        Portuguese label stored by older backend rows.

        Raises:
            ValueError: if the value matches no status
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for status in cls:
            if text in (status.value, status.name, status.label):
                return status
        if text in LEGACY_STATUS_VALUES:
            return LEGACY_STATUS_VALUES[text]
        raise ValueError(f"Unknown equipment status: {value!r}")


STATUS_LABELS = {
    EquipmentStatus.PENDING: "Awaiting Service",
    EquipmentStatus.IN_PROGRESS: "In Maintenance",
    EquipmentStatus.COMPLETED: "Completed",
    EquipmentStatus.READY: "Ready for Pickup",
    EquipmentStatus.DELIVERED: "Delivered",
    EquipmentStatus.CANCELLED: "Cancelled",
}

STATUS_COLORS = {
    EquipmentStatus.PENDING: "#F59E0B",
    EquipmentStatus.IN_PROGRESS: "#3B82F6",
    EquipmentStatus.COMPLETED: "#10B981",
    EquipmentStatus.READY: "#8B5CF6",
    EquipmentStatus.DELIVERED: "#64748B",
    EquipmentStatus.CANCELLED: "#EF4444",
}

# Values written by the first release of the backend
LEGACY_STATUS_VALUES = {
    "Aguardando Serviço": EquipmentStatus.PENDING,
    "Em Manutenção": EquipmentStatus.IN_PROGRESS,
    "Concluído": EquipmentStatus.COMPLETED,
    "Cancelado": EquipmentStatus.CANCELLED,
}


class EntityKind(str, Enum):
    """Collection kinds held by the Entity Store."""
    EQUIPMENT = "equipment"
    CUSTOMER = "customer"
    SUPPLIER = "supplier"

    @property
    def storage_key(self) -> str:
        """Name of the Persistence Mirror slot for this kind."""
        return STORAGE_KEYS[self]

    @property
    def entity_class(self) -> type:
        return ENTITY_CLASSES[self]


STORAGE_KEYS = {
    EntityKind.EQUIPMENT: "alvs_equipments",
    EntityKind.CUSTOMER: "alvs_customers",
    EntityKind.SUPPLIER: "alvs_suppliers",
}


# =============================================================================
# HELPERS
# =============================================================================

CODE_ALPHABET = string.digits + string.ascii_uppercase
CODE_RANDOM_LENGTH = 8


def new_id() -> str:
    """Opaque identity for a new entity."""
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO-8601 or ``YYYY-MM-DD HH:MM:SS`` timestamp.

    Naive values are read as UTC; unparseable values sort as the oldest
    possible instant.
    """
    text = str(value or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(CODE_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_equipment_code(prefix: str = "ALVS", now: Optional[float] = None) -> str:
    """
    Build a human-readable business code: ``PREFIX-TTTTTT-RRRRRRRR``.

    The time part is the last six base36 digits of the epoch milliseconds;
    the random part has 36**8 possible values, so codes generated within the
    same millisecond collide only with negligible probability.
    """
    millis = int((time.time() if now is None else now) * 1000)
    stamp = _to_base36(millis)[-6:].rjust(6, "0")
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_RANDOM_LENGTH))
    return f"{prefix}-{stamp}-{suffix}"


def _pick(data: Mapping[str, Any], camel: str, snake: Optional[str] = None, default: Any = "") -> Any:
    if camel in data and data[camel] is not None:
        return data[camel]
    if snake and snake in data and data[snake] is not None:
        return data[snake]
    return default


def _text(data: Mapping[str, Any], camel: str, snake: Optional[str] = None) -> str:
    return str(_pick(data, camel, snake, ""))


def _optional_text(data: Mapping[str, Any], camel: str, snake: Optional[str] = None) -> Optional[str]:
    value = _pick(data, camel, snake, None)
    if value is None or str(value) == "":
        return None
    return str(value)


def as_bool(value: Any) -> bool:
    """Interpret checkbox / database style truthy values."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on", "y")
    return bool(value)


def sort_newest_first(records: List[ServiceRecord]) -> List[ServiceRecord]:
    """Order records by date, newest first; ties keep their current order."""
    return sorted(records, key=lambda r: parse_timestamp(r.date), reverse=True)


# =============================================================================
# ENTITIES
# =============================================================================

@dataclass(frozen=True)
class ServiceRecord:
    """A maintenance intervention on one piece of equipment. Immutable."""
    id: str
    equipment_id: str
    date: str
    description: str
    service_type: str = ""
    resolution: str = ""
    resolved: bool = False
    technician_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "equipmentId": self.equipment_id,
            "date": self.date,
            "description": self.description,
            "serviceType": self.service_type,
            "resolution": self.resolution,
            "resolved": self.resolved,
            "technicianId": self.technician_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServiceRecord:
        return cls(
            id=_text(data, "id"),
            equipment_id=_text(data, "equipmentId", "equipment_id"),
            date=_text(data, "date"),
            description=_text(data, "description"),
            service_type=_text(data, "serviceType", "service_type"),
            resolution=_text(data, "resolution"),
            resolved=as_bool(_pick(data, "resolved", None, False)),
            technician_id=_text(data, "technicianId", "technician_id"),
        )


@dataclass
class Equipment:
    """A medical device received for maintenance."""
    id: str
    code: str
    name: str
    brand: str = ""
    model: str = ""
    manufacturer: str = ""
    serial_number: str = ""
    entry_date: str = ""
    observations: str = ""
    status: EquipmentStatus = EquipmentStatus.PENDING
    customer_id: str = ""
    supplier_id: Optional[str] = None
    service_records: List[ServiceRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "brand": self.brand,
            "model": self.model,
            "manufacturer": self.manufacturer,
            "serialNumber": self.serial_number,
            "entryDate": self.entry_date,
            "observations": self.observations,
            "status": self.status.value,
            "customerId": self.customer_id,
            "supplierId": self.supplier_id,
            "serviceRecords": [record.to_dict() for record in self.service_records],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Equipment:
        raw_status = _pick(data, "status", None, EquipmentStatus.PENDING.value)
        try:
            status = EquipmentStatus.parse(raw_status)
        except ValueError:
            logger.warning(f"Equipment {data.get('id')!r} has unknown status {raw_status!r}, shown as pending")
            status = EquipmentStatus.PENDING

        raw_records = _pick(data, "serviceRecords", "service_records", [])
        records = [
            ServiceRecord.from_dict(item)
            for item in (raw_records if isinstance(raw_records, list) else [])
            if isinstance(item, Mapping)
        ]

        return cls(
            id=_text(data, "id"),
            code=_text(data, "code"),
            name=_text(data, "name"),
            brand=_text(data, "brand"),
            model=_text(data, "model"),
            manufacturer=_text(data, "manufacturer"),
            serial_number=_text(data, "serialNumber", "serial_number"),
            entry_date=_text(data, "entryDate", "entry_date"),
            observations=_text(data, "observations"),
            status=status,
            customer_id=_text(data, "customerId", "customer_id"),
            supplier_id=_optional_text(data, "supplierId", "supplier_id"),
            service_records=sort_newest_first(records),
        )


@dataclass
class Customer:
    """A hospital unit or clinic that owns equipment."""
    id: str
    name: str
    tax_id: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "taxId": self.tax_id,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Customer:
        return cls(
            id=_text(data, "id"),
            name=_text(data, "name"),
            tax_id=_text(data, "taxId", "tax_id"),
            email=_text(data, "email"),
            phone=_text(data, "phone"),
            address=_text(data, "address"),
        )


@dataclass
class Supplier:
    """A parts or service supplier, optionally tied to one piece of equipment."""
    id: str
    name: str
    tax_id: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""
    equipment_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "taxId": self.tax_id,
            "contactName": self.contact_name,
            "email": self.email,
            "phone": self.phone,
            "equipmentId": self.equipment_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Supplier:
        return cls(
            id=_text(data, "id"),
            name=_text(data, "name"),
            tax_id=_text(data, "taxId", "tax_id"),
            contact_name=_text(data, "contactName", "contact_name"),
            email=_text(data, "email"),
            phone=_text(data, "phone"),
            equipment_id=_optional_text(data, "equipmentId", "equipment_id"),
        )


ENTITY_CLASSES = {
    EntityKind.EQUIPMENT: Equipment,
    EntityKind.CUSTOMER: Customer,
    EntityKind.SUPPLIER: Supplier,
}
