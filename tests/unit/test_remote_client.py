# =============================================================================
# tests/unit/test_remote_client.py
# Unit Tests for RemoteAPIClient
# =============================================================================

import pytest
import requests

from clineng_core.errors import MalformedResponseError, RemoteUnavailableError
from clineng_core.state.entities import Customer, Equipment, EquipmentStatus, ServiceRecord


class TestReads:

    def test_get_all_returns_rows(self, backend, client, remote_equipment_rows):
        backend.on("get_all", body=remote_equipment_rows)

        assert client.get_all() == remote_equipment_rows
        method, action, payload = backend.calls[0]
        assert (method, action, payload) == ("GET", "get_all", None)

    def test_non_2xx_is_unavailable(self, backend, client):
        backend.on("get_all", status_code=503, body={"error": "maintenance"})

        with pytest.raises(RemoteUnavailableError) as exc_info:
            client.get_all()

        assert exc_info.value.details["status_code"] == 503

    def test_network_error_is_unavailable(self, client):
        with pytest.raises(RemoteUnavailableError) as exc_info:
            client.get_customers()
        assert exc_info.value.details["action"] == "get_customers"

    def test_timeout_is_unavailable(self, backend, client):
        backend.on("get_all", raises=requests.exceptions.Timeout("slow"))
        with pytest.raises(RemoteUnavailableError):
            client.get_all()

    def test_invalid_json_is_malformed(self, backend, client):
        backend.on("get_all", invalid_json=True)
        with pytest.raises(MalformedResponseError):
            client.get_all()

    def test_non_array_is_malformed(self, backend, client):
        backend.on("get_customers", body={"message": "ALVS API Online"})

        with pytest.raises(MalformedResponseError) as exc_info:
            client.get_customers()

        assert isinstance(exc_info.value, RemoteUnavailableError)
        assert exc_info.value.code == "REMOTE_002"

    def test_array_of_non_objects_is_malformed(self, backend, client):
        backend.on("get_all", body=[1, 2, 3])
        with pytest.raises(MalformedResponseError):
            client.get_all()


class TestWrites:

    def test_add_equipment_posts_camel_case(self, backend, client):
        backend.accept_writes()
        equipment = Equipment(id="e1", code="ALVS-1", name="Monitor", serial_number="SN1", customer_id="c1")

        assert client.add_equipment(equipment) is True

        payload = backend.posted("add_equipment")[0]
        assert payload["serialNumber"] == "SN1"
        assert payload["customerId"] == "c1"

    def test_add_customer(self, backend, client):
        backend.accept_writes()
        client.add_customer(Customer(id="c5", name="Hospital X", tax_id="1"))
        assert backend.posted("add_customer")[0]["taxId"] == "1"

    def test_add_service_carries_new_status(self, backend, client):
        backend.accept_writes()
        record = ServiceRecord(id="s1", equipment_id="e1", date="2024-01-01T00:00:00Z", description="Fixed fuse")

        client.add_service(record, EquipmentStatus.COMPLETED)

        payload = backend.posted("add_service")[0]
        assert payload["newStatus"] == "Completed"
        assert payload["equipmentId"] == "e1"

    def test_prebuilt_body_is_sent_as_is(self, backend, client):
        backend.accept_writes()
        body = Equipment(id="e1", code="ALVS-1", name="Monitor").to_dict()

        client.add_service(
            ServiceRecord(id="s1", equipment_id="e1", date="2024-01-01T00:00:00Z", description="x").to_dict(),
            "Ready",
        )
        client.add_equipment(body)

        assert backend.posted("add_equipment")[0] == body
        assert backend.posted("add_service")[0]["newStatus"] == "Ready"

    def test_error_payload_is_not_confirmed(self, backend, client):
        backend.on("add_customer", body={"error": "Duplicate entry"})
        with pytest.raises(RemoteUnavailableError):
            client.add_customer(Customer(id="c5", name="Hospital X"))

    def test_missing_success_flag_is_malformed(self, backend, client):
        backend.on("add_customer", body={"message": "ALVS API Online"})
        with pytest.raises(MalformedResponseError):
            client.add_customer(Customer(id="c5", name="Hospital X"))


class TestConnection:

    def test_connection_report(self, backend, client, remote_equipment_rows):
        backend.on("get_all", body=remote_equipment_rows)
        assert client.test_connection()["rows_fetched"] == 1

    def test_connection_failure_report(self, client):
        assert client.test_connection()["status"] == "error"
