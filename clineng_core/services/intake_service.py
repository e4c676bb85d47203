# =============================================================================
# clineng_core/services/intake_service.py
# Intake Service: form submissions -> validated entities -> synchronizer
# =============================================================================

from __future__ import annotations
from typing import Any, Mapping

from clineng_core.offline.synchronizer import RemoteSynchronizer
from clineng_core.state.forms import (
    CustomerFields,
    EquipmentFields,
    ServiceRecordFields,
    SupplierFields,
)
from .base_service import BaseService, ServiceResult


class IntakeService(BaseService):
    """
    Entry point for the UI's create forms.

    Each method validates the raw form first; a validation or referential
    failure comes back as a failed ServiceResult and leaves every collection
    untouched.

    Usage:
        service = IntakeService(sync)
        result = service.register_equipment(form)
        if result:
            st.success(f"Registered {result.data.code}")
        else:
            st.error(result.error)
    """

    def __init__(self, synchronizer: RemoteSynchronizer):
        super().__init__()
        self.synchronizer = synchronizer

    def register_equipment(self, form: Mapping[str, Any]) -> ServiceResult:
        return self.safe_execute(
            "Registering equipment",
            lambda: self.synchronizer.add_equipment(EquipmentFields.from_form(form)),
        )

    def register_customer(self, form: Mapping[str, Any]) -> ServiceResult:
        return self.safe_execute(
            "Registering customer",
            lambda: self.synchronizer.add_customer(CustomerFields.from_form(form)),
        )

    def register_supplier(self, form: Mapping[str, Any]) -> ServiceResult:
        return self.safe_execute(
            "Registering supplier",
            lambda: self.synchronizer.add_supplier(SupplierFields.from_form(form)),
        )

    def record_service(self, equipment_id: str, form: Mapping[str, Any]) -> ServiceResult:
        """
        Form must carry the new equipment status under "status".
        """
        def _record():
            fields = ServiceRecordFields.from_form(form)
            return self.synchronizer.add_service_record(equipment_id, fields, form.get("status"))

        return self.safe_execute("Recording service", _record)

    def resynchronize(self) -> ServiceResult:
        status = self.synchronizer.resync()
        return ServiceResult.ok(status, metadata=self.synchronizer.get_status_display())
