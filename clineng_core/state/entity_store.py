# =============================================================================
# clineng_core/state/entity_store.py
# In-memory Entity Store
# =============================================================================
"""
EntityStore - canonical, currently displayed state of all collections.

The store only mutates memory. Mirroring to the local cache and pushing to
the remote API are the RemoteSynchronizer's job.

Usage:
    store = EntityStore.with_seed()
    equipment = store.add_equipment({"name": "Monitor", "serialNumber": "SN1"})
    store.add_service_record(equipment.id, {"description": "Fixed fuse"}, "InProgress")
"""

from __future__ import annotations
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from clineng_core.errors import DataValidationError, ReferentialIntegrityError
from clineng_core.logging import get_logger

from .entities import (
    Customer,
    EntityKind,
    Equipment,
    EquipmentStatus,
    ServiceRecord,
    Supplier,
    generate_equipment_code,
    new_id,
    sort_newest_first,
    utc_now_iso,
)
from .forms import CustomerFields, EquipmentFields, ServiceRecordFields, SupplierFields
from .seed import seed_customers, seed_equipment, seed_suppliers

logger = get_logger(__name__)

UNKNOWN_CUSTOMER = "Unknown"


class EntityStore:
    """Holds the equipment, customer and supplier collections for one session."""

    # Attempts at drawing a business code that is not already in the store
    MAX_CODE_ATTEMPTS = 10

    def __init__(
        self,
        equipment: Optional[Iterable[Equipment]] = None,
        customers: Optional[Iterable[Customer]] = None,
        suppliers: Optional[Iterable[Supplier]] = None,
        code_prefix: str = "ALVS",
        default_technician_id: str = "u1",
    ):
        self.code_prefix = code_prefix
        self.default_technician_id = default_technician_id
        self._lock = threading.RLock()
        self._collections: Dict[EntityKind, List[Any]] = {
            EntityKind.EQUIPMENT: list(equipment or []),
            EntityKind.CUSTOMER: list(customers or []),
            EntityKind.SUPPLIER: list(suppliers or []),
        }

    @classmethod
    def with_seed(cls, **kwargs) -> EntityStore:
        """Store pre-filled with the built-in demo records."""
        return cls(
            equipment=seed_equipment(),
            customers=seed_customers(),
            suppliers=seed_suppliers(),
            **kwargs,
        )

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    def get(self, kind: EntityKind) -> List[Any]:
        """Shallow copy of one collection, in display order."""
        with self._lock:
            return list(self._collections[EntityKind(kind)])

    @property
    def equipment(self) -> List[Equipment]:
        return self.get(EntityKind.EQUIPMENT)

    @property
    def customers(self) -> List[Customer]:
        return self.get(EntityKind.CUSTOMER)

    @property
    def suppliers(self) -> List[Supplier]:
        return self.get(EntityKind.SUPPLIER)

    def find_equipment(self, equipment_id: str) -> Optional[Equipment]:
        with self._lock:
            for item in self._collections[EntityKind.EQUIPMENT]:
                if item.id == equipment_id:
                    return item
        return None

    def find_customer(self, customer_id: str) -> Optional[Customer]:
        with self._lock:
            for item in self._collections[EntityKind.CUSTOMER]:
                if item.id == customer_id:
                    return item
        return None

    def customer_name(self, customer_id: Optional[str]) -> str:
        """Name for display; dangling references render as "Unknown"."""
        customer = self.find_customer(customer_id) if customer_id else None
        return customer.name if customer else UNKNOWN_CUSTOMER

    def snapshot(self) -> Dict[EntityKind, List[Any]]:
        with self._lock:
            return {kind: list(items) for kind, items in self._collections.items()}

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def replace_all(self, kind: EntityKind, items: Iterable[Union[Mapping[str, Any], Any]]) -> None:
        """
        Discard one collection and replace it wholesale.

        Items may be entities or raw mappings; mappings are parsed leniently.
        Anything else is a structural error.
        """
        kind = EntityKind(kind)
        entity_class = kind.entity_class
        parsed = []
        for item in items:
            if isinstance(item, entity_class):
                parsed.append(item)
            elif isinstance(item, Mapping):
                parsed.append(entity_class.from_dict(item))
            else:
                raise DataValidationError(
                    f"Cannot store {type(item).__name__} in the {kind.value} collection",
                    field=kind.value,
                    expected=entity_class.__name__,
                    actual=type(item).__name__,
                )

        with self._lock:
            self._collections[kind] = parsed
        logger.debug(f"Replaced {kind.value} collection with {len(parsed)} items")

    def add_equipment(self, fields: Union[EquipmentFields, Mapping[str, Any]]) -> Equipment:
        """Create equipment with a fresh id and code, status Pending, at the front."""
        if not isinstance(fields, EquipmentFields):
            fields = EquipmentFields.from_form(fields)

        with self._lock:
            equipment = Equipment(
                id=new_id(),
                code=self._unique_code(),
                name=fields.name,
                brand=fields.brand,
                model=fields.model,
                manufacturer=fields.manufacturer,
                serial_number=fields.serial_number,
                entry_date=utc_now_iso(),
                observations=fields.observations,
                status=EquipmentStatus.PENDING,
                customer_id=fields.customer_id,
                supplier_id=fields.supplier_id,
                service_records=[],
            )
            self._collections[EntityKind.EQUIPMENT].insert(0, equipment)
        return equipment

    def add_customer(self, fields: Union[CustomerFields, Mapping[str, Any]]) -> Customer:
        if not isinstance(fields, CustomerFields):
            fields = CustomerFields.from_form(fields)

        customer = Customer(
            id=new_id(),
            name=fields.name,
            tax_id=fields.tax_id,
            email=fields.email,
            phone=fields.phone,
            address=fields.address,
        )
        with self._lock:
            self._collections[EntityKind.CUSTOMER].insert(0, customer)
        return customer

    def add_supplier(self, fields: Union[SupplierFields, Mapping[str, Any]]) -> Supplier:
        if not isinstance(fields, SupplierFields):
            fields = SupplierFields.from_form(fields)

        supplier = Supplier(
            id=new_id(),
            name=fields.name,
            tax_id=fields.tax_id,
            contact_name=fields.contact_name,
            email=fields.email,
            phone=fields.phone,
            equipment_id=fields.equipment_id,
        )
        with self._lock:
            self._collections[EntityKind.SUPPLIER].insert(0, supplier)
        return supplier

    def add_service_record(
        self,
        equipment_id: str,
        fields: Union[ServiceRecordFields, Mapping[str, Any]],
        new_status: Union[EquipmentStatus, str],
    ) -> ServiceRecord:
        """
        Prepend a service record to an equipment and set its status together.

        Raises:
            ReferentialIntegrityError: equipment_id is not in the store (nothing changes)
            DataValidationError: fields or new_status do not parse (nothing changes)
        """
        if not isinstance(fields, ServiceRecordFields):
            fields = ServiceRecordFields.from_form(fields)
        try:
            status = EquipmentStatus.parse(new_status)
        except ValueError as e:
            raise DataValidationError(
                str(e),
                field="status",
                expected=", ".join(s.value for s in EquipmentStatus),
                actual=str(new_status),
            ) from e

        with self._lock:
            equipment = self.find_equipment(equipment_id)
            if equipment is None:
                raise ReferentialIntegrityError(
                    "Service record targets equipment that does not exist",
                    equipment_id=equipment_id,
                )

            record = ServiceRecord(
                id=new_id(),
                equipment_id=equipment.id,
                date=fields.date or utc_now_iso(),
                description=fields.description,
                service_type=fields.service_type,
                resolution=fields.resolution,
                resolved=fields.resolved,
                technician_id=fields.technician_id or self.default_technician_id,
            )
            records = sort_newest_first([record] + list(equipment.service_records))

            equipment.service_records = records
            equipment.status = status
        return record

    def _unique_code(self) -> str:
        taken = {item.code for item in self._collections[EntityKind.EQUIPMENT]}
        for _ in range(self.MAX_CODE_ATTEMPTS):
            code = generate_equipment_code(self.code_prefix)
            if code not in taken:
                return code
            logger.warning(f"Generated equipment code {code} already in use, regenerating")
        raise DataValidationError(
            "Could not generate a unique equipment code",
            field="code",
        )
