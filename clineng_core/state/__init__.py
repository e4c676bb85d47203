# =============================================================================
# clineng_core/state/__init__.py
# Domain entities and the in-memory Entity Store
# =============================================================================

from .entities import (
    EntityKind,
    EquipmentStatus,
    Equipment,
    Customer,
    Supplier,
    ServiceRecord,
    generate_equipment_code,
)
from .forms import EquipmentFields, CustomerFields, SupplierFields, ServiceRecordFields
from .entity_store import EntityStore

__all__ = [
    "EntityKind",
    "EquipmentStatus",
    "Equipment",
    "Customer",
    "Supplier",
    "ServiceRecord",
    "generate_equipment_code",
    "EquipmentFields",
    "CustomerFields",
    "SupplierFields",
    "ServiceRecordFields",
    "EntityStore",
]
