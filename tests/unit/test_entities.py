# =============================================================================
# tests/unit/test_entities.py
# Unit Tests for domain entities
# =============================================================================

import pytest
from datetime import timezone

from clineng_core.state.entities import (
    Customer,
    EntityKind,
    Equipment,
    EquipmentStatus,
    ServiceRecord,
    Supplier,
    generate_equipment_code,
    parse_timestamp,
)


class TestEquipmentStatus:
    """Test status parsing"""

    @pytest.mark.parametrize("value", ["InProgress", "IN_PROGRESS", "In Maintenance", "Em Manutenção"])
    def test_parse_accepts_value_name_label_and_legacy(self, value):
        assert EquipmentStatus.parse(value) is EquipmentStatus.IN_PROGRESS

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            EquipmentStatus.parse("Exploded")

    def test_status_compares_equal_to_wire_value(self):
        assert EquipmentStatus.READY == "Ready"

    def test_every_status_has_label_and_color(self):
        for status in EquipmentStatus:
            assert status.label
            assert status.color.startswith("#")


class TestEquipmentCode:
    """Test business code generation"""

    def test_code_starts_with_prefix(self):
        code = generate_equipment_code("ALVS")
        assert code.startswith("ALVS-")
        assert len(code) == len("ALVS-") + 6 + 1 + 8

    def test_codes_differ_within_same_millisecond(self):
        codes = {generate_equipment_code("ALVS", now=1_700_000_000.0) for _ in range(100)}
        assert len(codes) == 100

    def test_ten_thousand_codes_are_unique(self):
        codes = [generate_equipment_code("ALVS") for _ in range(10_000)]
        assert len(set(codes)) == len(codes)


class TestTimestamps:
    """Test timestamp parsing used for ordering"""

    def test_database_style_timestamp_is_utc(self):
        parsed = parse_timestamp("2024-03-05 14:00:00")
        assert parsed.tzinfo == timezone.utc
        assert parsed.hour == 14

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-03-05T14:00:00.000Z") == parse_timestamp("2024-03-05 14:00:00")

    def test_garbage_sorts_oldest(self):
        assert parse_timestamp("not a date") < parse_timestamp("1970-01-01T00:00:00")


class TestWireFormat:
    """Test to_dict / from_dict"""

    def test_equipment_from_database_row(self, remote_equipment_rows):
        equipment = Equipment.from_dict(remote_equipment_rows[0])

        assert equipment.serial_number == "DRG-778"
        assert equipment.customer_id == "c1"
        assert equipment.status is EquipmentStatus.IN_PROGRESS
        assert [r.id for r in equipment.service_records] == ["s-2", "s-1"]
        assert equipment.service_records[0].equipment_id == "e-100"

    def test_service_records_reordered_newest_first(self):
        equipment = Equipment.from_dict({
            "id": "e1", "code": "X", "name": "Bomba",
            "serviceRecords": [
                {"id": "old", "date": "2024-01-01T00:00:00Z"},
                {"id": "new", "date": "2024-06-01T00:00:00Z"},
            ],
        })
        assert [r.id for r in equipment.service_records] == ["new", "old"]

    def test_unknown_status_shown_as_pending(self):
        equipment = Equipment.from_dict({"id": "e1", "code": "X", "name": "Bomba", "status": "???"})
        assert equipment.status is EquipmentStatus.PENDING

    def test_equipment_to_dict_is_camel_case(self):
        equipment = Equipment(id="e1", code="ALVS-1", name="Monitor", serial_number="SN1", customer_id="c1")
        payload = equipment.to_dict()

        assert payload["serialNumber"] == "SN1"
        assert payload["customerId"] == "c1"
        assert payload["status"] == "Pending"
        assert payload["serviceRecords"] == []

    def test_service_record_resolved_from_database_flag(self):
        record = ServiceRecord.from_dict({"id": "s1", "equipment_id": "e1", "resolved": "1"})
        assert record.resolved is True

    def test_supplier_optional_equipment(self):
        supplier = Supplier.from_dict({"id": "s1", "name": "MedParts", "contactName": "Ana"})
        assert supplier.contact_name == "Ana"
        assert supplier.equipment_id is None

    def test_service_record_is_immutable(self):
        record = ServiceRecord(id="s1", equipment_id="e1", date="2024-01-01", description="x")
        with pytest.raises(AttributeError):
            record.description = "changed"


class TestEntityKind:
    def test_storage_keys(self):
        assert EntityKind.EQUIPMENT.storage_key == "alvs_equipments"
        assert EntityKind.CUSTOMER.storage_key == "alvs_customers"
        assert EntityKind.SUPPLIER.storage_key == "alvs_suppliers"

    def test_entity_classes(self):
        assert EntityKind.CUSTOMER.entity_class is Customer
