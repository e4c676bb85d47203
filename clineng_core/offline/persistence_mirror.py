# =============================================================================
# clineng_core/offline/persistence_mirror.py
# Durable write-through cache of the Entity Store
# =============================================================================
"""
PersistenceMirror - one JSON slot file per entity kind.

Directory Structure:
-------------------
local_data/mirror/
├── alvs_equipments.json     # JSON array of equipment (with serviceRecords)
├── alvs_customers.json
├── alvs_suppliers.json
└── mirror_metadata.json     # saved_at / item count per slot

The mirror is only read on a cold start or when a pull fails. A failed
write is logged and reported through the return value; it never touches
the live Entity Store.
"""

from __future__ import annotations
import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
import logging

from clineng_core.errors import PersistenceError
from clineng_core.state.entities import EntityKind

logger = logging.getLogger(__name__)

DEFAULT_MIRROR_DIR = Path("local_data") / "mirror"


class PersistenceMirror:
    """Saves and loads entity collections as JSON arrays on disk."""

    METADATA_FILE = "mirror_metadata.json"

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_MIRROR_DIR
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.metadata_file = self.data_dir / self.METADATA_FILE
        self._metadata = self._load_metadata()

    def _load_metadata(self) -> Dict[str, Any]:
        if self.metadata_file.exists():
            try:
                with open(self.metadata_file, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Error loading mirror metadata: {e}")
        return {}

    def _save_metadata(self) -> None:
        self._write_json(self.metadata_file, self._metadata)

    def _slot_path(self, kind: EntityKind) -> Path:
        return self.data_dir / f"{EntityKind(kind).storage_key}.json"

    @staticmethod
    def _write_json(path: Path, payload: Any) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def save(self, kind: EntityKind, collection: Sequence[Any]) -> bool:
        """
        Serialize a collection into the slot for its kind.

        Returns:
            True if the slot was written, False if the write failed
        """
        kind = EntityKind(kind)
        try:
            self.write(kind, collection)
            return True
        except PersistenceError as e:
            logger.error(f"Mirror save failed: {e}")
            return False

    def write(self, kind: EntityKind, collection: Sequence[Any]) -> None:
        """
        Like save(), but raises PersistenceError on failure.
        """
        kind = EntityKind(kind)
        path = self._slot_path(kind)
        try:
            payload = [item.to_dict() for item in collection]
            self._write_json(path, payload)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(
                f"Could not write {kind.value} collection: {e}",
                slot=kind.storage_key,
            ) from e

        self._metadata[kind.storage_key] = {
            "path": str(path),
            "count": len(payload),
            "saved_at": datetime.now().isoformat(),
        }
        try:
            self._save_metadata()
        except OSError as e:
            logger.warning(f"Error saving mirror metadata: {e}")

    def load(self, kind: EntityKind) -> Optional[List[Any]]:
        """
        Return the collection saved for a kind, or None if nothing usable was saved.
        """
        kind = EntityKind(kind)
        path = self._slot_path(kind)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Mirror slot {kind.storage_key} is unreadable: {e}")
            return None

        if not isinstance(payload, list):
            logger.warning(f"Mirror slot {kind.storage_key} does not hold an array")
            return None

        entity_class = kind.entity_class
        return [entity_class.from_dict(item) for item in payload if isinstance(item, dict)]

    def has(self, kind: EntityKind) -> bool:
        return self._slot_path(kind).exists()

    def delete(self, kind: EntityKind) -> bool:
        """Remove one slot."""
        kind = EntityKind(kind)
        try:
            path = self._slot_path(kind)
            if path.exists():
                path.unlink()
            self._metadata.pop(kind.storage_key, None)
            self._save_metadata()
            return True
        except OSError as e:
            logger.error(f"Mirror delete error for {kind.storage_key}: {e}")
            return False

    def clear(self) -> bool:
        """Remove every slot."""
        return all([self.delete(kind) for kind in EntityKind])

    def get_info(self) -> Dict[str, Any]:
        """Information about the mirrored slots for display."""
        items = []
        total_size = 0
        for kind in EntityKind:
            path = self._slot_path(kind)
            if not path.exists():
                continue
            size = path.stat().st_size
            total_size += size
            meta = self._metadata.get(kind.storage_key, {})
            items.append({
                "kind": kind.value,
                "slot": kind.storage_key,
                "count": meta.get("count"),
                "size_kb": round(size / 1024, 2),
                "saved_at": meta.get("saved_at"),
            })

        return {
            "total_size_kb": round(total_size / 1024, 2),
            "item_count": len(items),
            "items": items,
            "data_dir": str(self.data_dir),
        }
