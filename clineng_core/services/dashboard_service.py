"""
Dashboard Service - read-only views over the Entity Store.

Builds the pandas tables behind the dashboard (status breakdown, recent
services), the equipment search, and the report data handed to document
generation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from clineng_core.state.entities import Equipment, EquipmentStatus, parse_timestamp
from clineng_core.state.entity_store import EntityStore
from .base_service import BaseService, ServiceResult


EQUIPMENT_COLUMNS = [
    "code", "name", "brand", "model", "manufacturer", "serial_number",
    "status", "customer", "entry_date", "service_count",
]

SERVICE_COLUMNS = [
    "date", "description", "service_type", "resolution", "resolved",
    "technician_id", "equipment_name", "equipment_code",
]


@dataclass
class Branding:
    """Branding descriptor printed on generated documents."""
    company_name: str = "ALVS Engineering & Medical"
    tagline: str = "ENGINEERING & MEDICAL"
    primary_color: str = "#FF3D3D"    # brand red
    secondary_color: str = "#333333"  # dark grey


@dataclass
class EquipmentReport:
    """Everything the report generator needs for one piece of equipment."""
    branding: Branding
    equipment: Equipment
    customer_name: str
    history: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=SERVICE_COLUMNS))

    def summary(self) -> pd.Series:
        e = self.equipment
        return pd.Series({
            "Code": e.code,
            "Equipment": e.name,
            "Brand": e.brand,
            "Model": e.model,
            "Manufacturer": e.manufacturer,
            "Serial number": e.serial_number,
            "Customer": self.customer_name,
            "Entry date": e.entry_date,
            "Status": e.status.label,
            "Observations": e.observations,
        })

    def to_csv_bytes(self) -> bytes:
        header = f"{self.branding.company_name}\nTechnical report {self.equipment.code}\n\n"
        summary = self.summary().to_frame("Value").to_csv(index_label="Field")
        history = self.history.to_csv(index=False)
        return (header + summary + "\nService history\n" + history).encode("utf-8")


class DashboardService(BaseService):
    """
    Usage:
        dashboard = DashboardService(store)
        counts = dashboard.status_counts()
        recent = dashboard.recent_services(limit=5)
    """

    def __init__(self, store: EntityStore, branding: Optional[Branding] = None):
        super().__init__()
        self.store = store
        self.branding = branding or Branding()

    # =========================================================================
    # TABLES
    # =========================================================================

    def equipment_frame(self, equipment: Optional[List[Equipment]] = None) -> pd.DataFrame:
        items = self.store.equipment if equipment is None else equipment
        rows = [
            {
                "code": e.code,
                "name": e.name,
                "brand": e.brand,
                "model": e.model,
                "manufacturer": e.manufacturer,
                "serial_number": e.serial_number,
                "status": e.status.label,
                "customer": self.store.customer_name(e.customer_id),
                "entry_date": e.entry_date,
                "service_count": len(e.service_records),
            }
            for e in items
        ]
        return pd.DataFrame(rows, columns=EQUIPMENT_COLUMNS)

    def status_counts(self) -> pd.DataFrame:
        """Equipment count for every status, zero-filled, in workflow order."""
        counts = pd.Series(
            [e.status.value for e in self.store.equipment], dtype="object"
        ).value_counts()
        return pd.DataFrame({
            "status": [s.value for s in EquipmentStatus],
            "label": [s.label for s in EquipmentStatus],
            "count": [int(counts.get(s.value, 0)) for s in EquipmentStatus],
            "color": [s.color for s in EquipmentStatus],
        })

    def _service_frame(self, equipment: List[Equipment]) -> pd.DataFrame:
        rows = [
            {
                "date": r.date,
                "description": r.description,
                "service_type": r.service_type,
                "resolution": r.resolution,
                "resolved": r.resolved,
                "technician_id": r.technician_id,
                "equipment_name": e.name,
                "equipment_code": e.code,
                "_sort": parse_timestamp(r.date).timestamp(),
            }
            for e in equipment
            for r in e.service_records
        ]
        if not rows:
            return pd.DataFrame(columns=SERVICE_COLUMNS)
        frame = pd.DataFrame(rows).sort_values("_sort", ascending=False, kind="stable")
        return frame.drop(columns="_sort").reset_index(drop=True)[SERVICE_COLUMNS]

    def recent_services(self, limit: int = 5) -> pd.DataFrame:
        """Most recent service records across all equipment."""
        return self._service_frame(self.store.equipment).head(limit)

    def search_equipment(self, query: str) -> List[Equipment]:
        """Case-insensitive match on equipment name or code."""
        needle = (query or "").strip().lower()
        items = self.store.equipment
        if not needle:
            return items
        return [e for e in items if needle in e.name.lower() or needle in e.code.lower()]

    # =========================================================================
    # REPORTS
    # =========================================================================

    def equipment_report(self, equipment_id: str) -> ServiceResult:
        equipment = self.store.find_equipment(equipment_id)
        if equipment is None:
            return ServiceResult.fail(
                f"Equipment {equipment_id} not found",
                error_code="DATA_002",
            )
        return ServiceResult.ok(EquipmentReport(
            branding=self.branding,
            equipment=equipment,
            customer_name=self.store.customer_name(equipment.customer_id),
            history=self._service_frame([equipment]),
        ))

    def inventory_csv(self) -> bytes:
        """All equipment as a downloadable CSV."""
        frame = self.equipment_frame()
        header = f"{self.branding.company_name}\nEquipment inventory\n\n"
        return (header + frame.to_csv(index=False)).encode("utf-8")
