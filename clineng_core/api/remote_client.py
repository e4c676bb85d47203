"""
Remote API client for the ALVS backend.
Every action is selected with the ``action`` query parameter on one endpoint.
"""
from typing import Optional, Dict, Any, List, Mapping, Union
from dataclasses import dataclass
import logging

import requests

from clineng_core.errors import MalformedResponseError, RemoteUnavailableError
from clineng_core.state.entities import Customer, Equipment, EquipmentStatus, ServiceRecord

logger = logging.getLogger(__name__)


@dataclass
class APIConfig:
    """Configuration for API connection"""
    api_name: str
    base_url: str
    headers: Optional[Dict[str, str]] = None
    timeout: float = 10.0


class RemoteAPIClient:
    """
    Thin JSON-over-HTTP client. Every failure surfaces as
    RemoteUnavailableError (or its MalformedResponseError subclass), so the
    synchronizer can treat them uniformly.
    """

    def __init__(self, config: APIConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        if config.headers:
            self.session.headers.update(config.headers)

    def _make_request(
        self,
        action: str,
        method: str = "GET",
        data: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Make HTTP request and decode the JSON body.

        Args:
            action: Backend action name (sent as ?action=...)
            method: HTTP method (GET, POST)
            data: JSON request body

        Returns:
            Decoded JSON body
        """
        try:
            response = self.session.request(
                method=method,
                url=self.config.base_url,
                params={"action": action},
                json=data,
                timeout=self.config.timeout
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise RemoteUnavailableError(
                f"{self.config.api_name} answered {status_code} for {action}",
                action=action,
                status_code=status_code,
            ) from e
        except requests.exceptions.RequestException as e:
            raise RemoteUnavailableError(
                f"API request failed for {self.config.api_name}: {str(e)}",
                action=action,
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{self.config.api_name} returned a non-JSON body for {action}",
                action=action,
                status_code=response.status_code,
            ) from e

    def _get_collection(self, action: str) -> List[Dict[str, Any]]:
        body = self._make_request(action)
        if not isinstance(body, list):
            raise MalformedResponseError(
                f"Expected a JSON array from {action}, got {type(body).__name__}",
                action=action,
            )
        if not all(isinstance(item, dict) for item in body):
            raise MalformedResponseError(
                f"Expected an array of objects from {action}",
                action=action,
            )
        return body

    def _post(self, action: str, payload: Dict[str, Any]) -> bool:
        body = self._make_request(action, method="POST", data=payload)
        if not isinstance(body, dict):
            raise MalformedResponseError(
                f"Expected a JSON object from {action}, got {type(body).__name__}",
                action=action,
            )
        if body.get("error"):
            raise RemoteUnavailableError(
                f"{self.config.api_name} rejected {action}: {body['error']}",
                action=action,
            )
        if body.get("success") is not True:
            raise MalformedResponseError(
                f"{action} did not confirm success",
                action=action,
            )
        return True

    # =========================================================================
    # READ ACTIONS
    # =========================================================================

    def get_all(self) -> List[Dict[str, Any]]:
        """All equipment, each with a nested serviceRecords array."""
        return self._get_collection("get_all")

    def get_customers(self) -> List[Dict[str, Any]]:
        return self._get_collection("get_customers")

    # =========================================================================
    # WRITE ACTIONS
    # =========================================================================

    @staticmethod
    def _payload(item: Any) -> Dict[str, Any]:
        """Entities are serialized now; mappings are taken as already-built bodies."""
        if isinstance(item, Mapping):
            return dict(item)
        return item.to_dict()

    def add_equipment(self, equipment: Union[Equipment, Mapping[str, Any]]) -> bool:
        return self._post("add_equipment", self._payload(equipment))

    def add_customer(self, customer: Union[Customer, Mapping[str, Any]]) -> bool:
        return self._post("add_customer", self._payload(customer))

    def add_service(
        self,
        record: Union[ServiceRecord, Mapping[str, Any]],
        new_status: EquipmentStatus,
    ) -> bool:
        """The backend inserts the record and updates the equipment status together."""
        payload = self._payload(record)
        payload["newStatus"] = EquipmentStatus.parse(new_status).value
        return self._post("add_service", payload)

    def test_connection(self) -> Dict[str, Any]:
        """
        Test API connection and return status

        Returns:
            Dict with status, message, and metadata
        """
        try:
            rows = self.get_all()
            return {
                "status": "success",
                "message": f"Successfully connected to {self.config.api_name}",
                "rows_fetched": len(rows),
            }
        except RemoteUnavailableError as e:
            return {
                "status": "error",
                "message": f"Connection failed: {e.message}"
            }
