# =============================================================================
# clineng_core/state/forms.py
# Typed form payloads, validated at the UI boundary
# =============================================================================
"""
Form submissions arrive as loose string mappings. Each ``*Fields`` class
parses one into a typed structure and fails fast with DataValidationError
instead of letting empty or missing values reach the Entity Store.

Keys may be given in camelCase (``serialNumber``) or snake_case
(``serial_number``).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from clineng_core.errors import DataValidationError
from .entities import as_bool, parse_timestamp


def _field(
    form: Mapping[str, Any],
    name: str,
    camel: Optional[str] = None,
    label: Optional[str] = None,
    required: bool = False,
) -> str:
    value = form.get(camel) if camel and form.get(camel) is not None else form.get(name)
    text = "" if value is None else str(value).strip()
    if required and not text:
        raise DataValidationError(
            f"{label or name} is required",
            field=name,
            expected="non-empty text",
            actual=text,
        )
    return text


def _optional(form: Mapping[str, Any], name: str, camel: Optional[str] = None) -> Optional[str]:
    return _field(form, name, camel) or None


@dataclass(frozen=True)
class EquipmentFields:
    name: str
    serial_number: str
    brand: str = ""
    model: str = ""
    manufacturer: str = ""
    observations: str = ""
    customer_id: str = ""
    supplier_id: Optional[str] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> EquipmentFields:
        return cls(
            name=_field(form, "name", label="Equipment name", required=True),
            serial_number=_field(form, "serial_number", "serialNumber", "Serial number", required=True),
            brand=_field(form, "brand"),
            model=_field(form, "model"),
            manufacturer=_field(form, "manufacturer"),
            observations=_field(form, "observations"),
            customer_id=_field(form, "customer_id", "customerId"),
            supplier_id=_optional(form, "supplier_id", "supplierId"),
        )


@dataclass(frozen=True)
class CustomerFields:
    name: str
    tax_id: str
    email: str = ""
    phone: str = ""
    address: str = ""

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> CustomerFields:
        return cls(
            name=_field(form, "name", label="Customer name", required=True),
            tax_id=_field(form, "tax_id", "taxId", "Tax identifier", required=True),
            email=_field(form, "email"),
            phone=_field(form, "phone"),
            address=_field(form, "address"),
        )


@dataclass(frozen=True)
class SupplierFields:
    name: str
    tax_id: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""
    equipment_id: Optional[str] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> SupplierFields:
        return cls(
            name=_field(form, "name", label="Supplier name", required=True),
            tax_id=_field(form, "tax_id", "taxId"),
            contact_name=_field(form, "contact_name", "contactName"),
            email=_field(form, "email"),
            phone=_field(form, "phone"),
            equipment_id=_optional(form, "equipment_id", "equipmentId"),
        )


@dataclass(frozen=True)
class ServiceRecordFields:
    description: str
    service_type: str = ""
    resolution: str = ""
    resolved: bool = False
    technician_id: Optional[str] = None
    date: Optional[str] = None  # ISO timestamp; defaults to "now" when the record is created

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> ServiceRecordFields:
        date = _optional(form, "date")
        if date is not None and parse_timestamp(date).year == 1:
            raise DataValidationError(
                "Service date is not a valid timestamp",
                field="date",
                expected="ISO-8601 timestamp",
                actual=date,
            )
        return cls(
            description=_field(form, "description", label="Service description", required=True),
            service_type=_field(form, "service_type", "serviceType"),
            resolution=_field(form, "resolution"),
            resolved=as_bool(form.get("resolved", False)),
            technician_id=_optional(form, "technician_id", "technicianId"),
            date=date,
        )
