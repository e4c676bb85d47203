# =============================================================================
# tests/integration/test_sync_scenario.py
# End-to-end synchronization scenarios over a fake HTTP backend
# =============================================================================

import pytest

from clineng_core.config import AppConfig, build_synchronizer
from clineng_core.offline.synchronizer import SyncStatus
from clineng_core.state.entities import EntityKind, EquipmentStatus


@pytest.fixture
def config(tmp_path):
    return AppConfig(data_dir=str(tmp_path / "mirror"), background_pushes=False)


@pytest.fixture
def build(config, backend):
    created = []

    def _build():
        sync = build_synchronizer(config, session=backend.session)
        created.append(sync)
        return sync

    yield _build

    for sync in created:
        sync.shutdown()


class TestOfflineSession:

    def test_work_done_offline_survives_restart(self, build, equipment_form):
        sync = build()
        assert sync.start() is SyncStatus.OFFLINE

        equipment = sync.add_equipment(equipment_form)
        record = sync.add_service_record(
            equipment.id, {"description": "Replaced battery"}, EquipmentStatus.COMPLETED
        )
        sync.add_supplier({"name": "MedParts"})

        assert sync.store.equipment[0].status is EquipmentStatus.COMPLETED
        assert sync.state.pushes_failed == 2

        restarted = build()
        assert restarted.start() is SyncStatus.OFFLINE

        restored = restarted.store.find_equipment(equipment.id)
        assert restored.status is EquipmentStatus.COMPLETED
        assert restored.service_records == [record]
        assert [s.name for s in restarted.store.suppliers] == ["MedParts"]


class TestOnlineSession:

    def test_pull_then_push_carries_wire_payloads(self, build, backend, remote_equipment_rows,
                                                  remote_customer_rows):
        backend.on("get_all", body=remote_equipment_rows).on("get_customers", body=remote_customer_rows)
        backend.accept_writes()
        sync = build()

        assert sync.start() is SyncStatus.SYNCED
        pulled = sync.store.find_equipment("e-100")
        assert pulled.status is EquipmentStatus.IN_PROGRESS
        assert [r.id for r in pulled.service_records] == ["s-2", "s-1"]

        customer = sync.add_customer({"name": "Clínica Sul", "taxId": "55"})
        sync.add_service_record("e-100", {"description": "Final test"}, "Ready")

        customer_payload = backend.posted("add_customer")[0]
        assert customer_payload["id"] == customer.id
        assert customer_payload["taxId"] == "55"

        service_payload = backend.posted("add_service")[0]
        assert service_payload["equipmentId"] == "e-100"
        assert service_payload["technicianId"] == "u1"
        assert service_payload["newStatus"] == "Ready"
        assert sync.state.pushes_confirmed == 2

    def test_backend_outage_falls_back_to_last_pull(self, build, backend, remote_equipment_rows,
                                                    remote_customer_rows):
        backend.on("get_all", body=remote_equipment_rows).on("get_customers", body=remote_customer_rows)
        sync = build()
        sync.start()

        backend.on("get_all", status_code=503, body=None)

        assert sync.resync() is SyncStatus.OFFLINE
        assert [e.id for e in sync.store.equipment] == ["e-100"]
        assert [c.id for c in sync.store.customers] == ["c9"]
        assert sync.mirror.load(EntityKind.CUSTOMER) == sync.store.customers
