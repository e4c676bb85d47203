# =============================================================================
# clineng_core/services/__init__.py
# Service Layer for the ALVS workbench
# Separates business logic from UI presentation
# =============================================================================
"""
Usage Example:
-------------
    from clineng_core.services import IntakeService, DashboardService

    intake = IntakeService(sync)
    result = intake.register_equipment({"name": "Monitor", "serialNumber": "SN1"})
    if result.success:
        print(result.data.code)

    dashboard = DashboardService(sync.store)
    print(dashboard.status_counts())
"""

from .base_service import BaseService, ServiceResult
from .intake_service import IntakeService
from .dashboard_service import Branding, DashboardService, EquipmentReport

__all__ = [
    "BaseService",
    "ServiceResult",
    "IntakeService",
    "DashboardService",
    "Branding",
    "EquipmentReport",
]
