# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
import requests
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

from clineng_core.api.remote_client import APIConfig, RemoteAPIClient
from clineng_core.offline.persistence_mirror import PersistenceMirror
from clineng_core.offline.synchronizer import RemoteSynchronizer
from clineng_core.state.entity_store import EntityStore


# =============================================================================
# FAKE HTTP BACKEND
# =============================================================================

def make_response(status_code: int = 200, body: Any = None, invalid_json: bool = False) -> MagicMock:
    """Build a requests.Response stand-in"""
    response = MagicMock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    if invalid_json:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body
    return response


class FakeBackend:
    """
    Routes session.request(...) calls by their ``action`` query parameter.
    Actions without a route behave like an unreachable host.
    """

    def __init__(self):
        self.routes: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.session = MagicMock()
        self.session.headers = {}
        self.session.request.side_effect = self._request

    def on(self, action: str, body: Any = None, status_code: int = 200,
           invalid_json: bool = False, raises: Optional[Exception] = None) -> "FakeBackend":
        self.routes[action] = {
            "body": body,
            "status_code": status_code,
            "invalid_json": invalid_json,
            "raises": raises,
        }
        return self

    def accept_writes(self) -> "FakeBackend":
        for action in ("add_equipment", "add_customer", "add_service"):
            self.on(action, body={"success": True})
        return self

    def _request(self, method, url, params=None, json=None, timeout=None):
        action = (params or {}).get("action")
        self.calls.append((method, action, json))
        route = self.routes.get(action)
        if route is None:
            raise requests.exceptions.ConnectionError(f"Cannot reach {url}")
        if route["raises"] is not None:
            raise route["raises"]
        body = route["body"]
        if callable(body):
            body = body()
        return make_response(route["status_code"], body, route["invalid_json"])

    def posted(self, action: str) -> List[Dict[str, Any]]:
        return [payload for method, name, payload in self.calls if method == "POST" and name == action]


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def remote_equipment_rows():
    """Rows as the backend's get_all returns them (database column names)"""
    return [
        {
            "id": "e-100",
            "code": "ALVS-000001-AAAAAAAA",
            "name": "Ventilador Pulmonar",
            "brand": "Dräger",
            "model": "Savina 300",
            "manufacturer": "Dräger Medical",
            "serial_number": "DRG-778",
            "entry_date": "2024-03-01 09:30:00",
            "observations": "Alarme de pressão intermitente",
            "status": "Em Manutenção",
            "customer_id": "c1",
            "created_at": "2024-03-01 09:30:00",
            "serviceRecords": [
                {
                    "id": "s-2",
                    "equipment_id": "e-100",
                    "date": "2024-03-05 14:00:00",
                    "description": "Troca de sensor de fluxo",
                    "technician_id": "u1",
                },
                {
                    "id": "s-1",
                    "equipment_id": "e-100",
                    "date": "2024-03-02 10:00:00",
                    "description": "Diagnóstico inicial",
                    "technician_id": "u1",
                },
            ],
        }
    ]


@pytest.fixture
def remote_customer_rows():
    return [
        {
            "id": "c9",
            "name": "Hospital Regional Norte",
            "taxId": "11.222.333/0001-44",
            "email": "engenharia@hrn.org",
            "phone": "(31) 3333-4444",
            "address": "Rua Central, 10",
        }
    ]


@pytest.fixture
def equipment_form():
    return {
        "name": "Monitor",
        "brand": "Philips",
        "model": "X1",
        "serialNumber": "SN1",
        "customerId": "c1",
    }


# =============================================================================
# COMPONENT FIXTURES
# =============================================================================

@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    return RemoteAPIClient(
        APIConfig(api_name="test-api", base_url="http://backend.test/api.php", timeout=1),
        session=backend.session,
    )


@pytest.fixture
def mirror(tmp_path):
    return PersistenceMirror(tmp_path / "mirror")


@pytest.fixture
def store():
    return EntityStore.with_seed()


@pytest.fixture
def make_sync(store, mirror, client):
    """Factory for a synchronizer over the shared store / mirror / client"""
    created = []

    def _make(background_pushes: bool = False) -> RemoteSynchronizer:
        sync = RemoteSynchronizer(store, mirror, client, background_pushes=background_pushes)
        created.append(sync)
        return sync

    yield _make

    for sync in created:
        sync.shutdown()


@pytest.fixture
def mock_streamlit(monkeypatch):
    """Mock the Streamlit calls made by the error handlers"""
    mock_st = MagicMock()
    mock_st.session_state = {}
    monkeypatch.setattr("clineng_core.errors.handlers.st", mock_st)
    return mock_st
