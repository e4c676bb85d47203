# =============================================================================
# tests/unit/test_persistence_mirror.py
# Unit Tests for PersistenceMirror
# =============================================================================

import json

from clineng_core.offline.persistence_mirror import PersistenceMirror
from clineng_core.state.entities import EntityKind, Equipment, ServiceRecord, Supplier


class TestRoundTrip:

    def test_equipment_with_history(self, mirror, remote_equipment_rows):
        collection = [Equipment.from_dict(row) for row in remote_equipment_rows]
        collection.append(Equipment(id="e2", code="ALVS-2", name="Oxímetro", supplier_id="s1"))

        assert mirror.save(EntityKind.EQUIPMENT, collection)

        assert mirror.load(EntityKind.EQUIPMENT) == collection

    def test_customers(self, mirror, store):
        mirror.save(EntityKind.CUSTOMER, store.customers)
        assert mirror.load(EntityKind.CUSTOMER) == store.customers

    def test_suppliers(self, mirror):
        suppliers = [Supplier(id="s1", name="MedParts", equipment_id=None)]
        mirror.save(EntityKind.SUPPLIER, suppliers)
        assert mirror.load(EntityKind.SUPPLIER) == suppliers

    def test_empty_collection_is_not_absent(self, mirror):
        mirror.save(EntityKind.EQUIPMENT, [])
        assert mirror.load(EntityKind.EQUIPMENT) == []

    def test_survives_new_instance(self, tmp_path, store):
        PersistenceMirror(tmp_path / "m").save(EntityKind.CUSTOMER, store.customers)
        assert PersistenceMirror(tmp_path / "m").load(EntityKind.CUSTOMER) == store.customers

    def test_unicode_kept(self, mirror):
        record = ServiceRecord(id="s1", equipment_id="e1", date="2024-01-01", description="Calibração")
        mirror.save(EntityKind.EQUIPMENT, [Equipment(id="e1", code="X", name="Bomba", service_records=[record])])
        assert mirror.load(EntityKind.EQUIPMENT)[0].service_records[0].description == "Calibração"


class TestAbsentOrDamaged:

    def test_first_run_is_absent(self, mirror):
        assert mirror.load(EntityKind.EQUIPMENT) is None
        assert not mirror.has(EntityKind.EQUIPMENT)

    def test_corrupt_slot_is_absent(self, mirror):
        (mirror.data_dir / "alvs_customers.json").write_text("{not json", encoding="utf-8")
        assert mirror.load(EntityKind.CUSTOMER) is None

    def test_non_array_slot_is_absent(self, mirror):
        (mirror.data_dir / "alvs_customers.json").write_text(json.dumps({"id": "c1"}), encoding="utf-8")
        assert mirror.load(EntityKind.CUSTOMER) is None

    def test_slot_layout(self, mirror, store):
        mirror.save(EntityKind.CUSTOMER, store.customers)
        payload = json.loads((mirror.data_dir / "alvs_customers.json").read_text(encoding="utf-8"))
        assert payload[0]["taxId"] == "12.345.678/0001-90"


class TestWriteFailures:

    def test_save_reports_failure(self, mirror, store, monkeypatch):
        def broken_write(path, payload):
            raise OSError("disk full")

        monkeypatch.setattr(PersistenceMirror, "_write_json", staticmethod(broken_write))

        assert mirror.save(EntityKind.CUSTOMER, store.customers) is False
        assert mirror.load(EntityKind.CUSTOMER) is None


class TestHousekeeping:

    def test_info_and_clear(self, mirror, store):
        mirror.save(EntityKind.CUSTOMER, store.customers)

        info = mirror.get_info()
        assert info["item_count"] == 1
        assert info["items"][0]["count"] == 2

        assert mirror.clear()
        assert mirror.load(EntityKind.CUSTOMER) is None
        assert mirror.get_info()["item_count"] == 0
