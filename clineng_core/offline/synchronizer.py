# =============================================================================
# clineng_core/offline/synchronizer.py
# Remote Synchronizer: pull with mirror fallback, optimistic pushes
# =============================================================================
"""
RemoteSynchronizer - bridges the Entity Store and the remote API.

State machine:
    UNINITIALIZED -> PULLING -> SYNCED | OFFLINE
    SYNCED / OFFLINE -> PULLING (resync)

Features:
- Pull of equipment and customers; all-or-nothing application
- Fallback to the Persistence Mirror when any pull request fails
- Optimistic mutations: store first, mirror second, push in the background
- Push payloads are snapshots taken at mutation time, sent in FIFO order
- Push failures logged and counted, never rolled back, never retried
- Stale pull responses discarded via a monotonically increasing ticket
- Suppliers stay local: mirrored, never pulled or pushed
"""

from __future__ import annotations
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Union
import logging

from clineng_core.api.remote_client import RemoteAPIClient
from clineng_core.errors import RemoteUnavailableError
from clineng_core.offline.persistence_mirror import PersistenceMirror
from clineng_core.state.entities import (
    Customer,
    EntityKind,
    Equipment,
    EquipmentStatus,
    ServiceRecord,
    Supplier,
)
from clineng_core.state.entity_store import EntityStore
from clineng_core.state.forms import (
    CustomerFields,
    EquipmentFields,
    ServiceRecordFields,
    SupplierFields,
)

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    """Synchronizer states."""
    UNINITIALIZED = "uninitialized"
    PULLING = "pulling"
    SYNCED = "synced"       # last pull succeeded
    OFFLINE = "offline"     # last pull failed, running on mirrored data


@dataclass
class SyncState:
    """Current sync state."""
    status: SyncStatus = SyncStatus.UNINITIALIZED
    last_pull: Optional[datetime] = None
    last_sync_success: Optional[datetime] = None
    pushes_confirmed: int = 0
    pushes_failed: int = 0
    mirror_failures: int = 0
    stale_pulls_discarded: int = 0
    last_error: Optional[str] = None


class RemoteSynchronizer:
    """
    Keeps the Entity Store, the Persistence Mirror and the remote API coherent
    for a single client.

    Usage:
        sync = RemoteSynchronizer(store, mirror, client)
        sync.start()
        equipment = sync.add_equipment({"name": "Monitor", "serialNumber": "SN1"})
        sync.resync()
    """

    # Kinds exchanged with the remote API
    REMOTE_KINDS = (EntityKind.EQUIPMENT, EntityKind.CUSTOMER)
    # Kinds that only live in memory and in the mirror
    LOCAL_KINDS = (EntityKind.SUPPLIER,)

    # One worker: pushes reach the backend in mutation order
    PUSH_WORKERS = 1

    def __init__(
        self,
        store: EntityStore,
        mirror: PersistenceMirror,
        client: RemoteAPIClient,
        background_pushes: bool = True,
    ):
        self.store = store
        self.mirror = mirror
        self.client = client
        self.background_pushes = background_pushes

        self._state = SyncState()
        self._lock = threading.RLock()
        self._callbacks: List[Callable[[SyncState], None]] = []
        self._pull_ticket = 0
        self._applied_ticket = 0
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: Set[Future] = set()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def status(self) -> SyncStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.status == SyncStatus.SYNCED

    @property
    def is_offline(self) -> bool:
        return self._state.status == SyncStatus.OFFLINE

    @property
    def pending_push_count(self) -> int:
        with self._lock:
            return len(self._pending)

    # =========================================================================
    # PULL
    # =========================================================================

    def start(self) -> SyncStatus:
        """
        Cold start: restore local-only collections from the mirror, then pull.
        """
        for kind in self.LOCAL_KINDS:
            items = self.mirror.load(kind)
            if items is not None:
                self.store.replace_all(kind, items)
        logger.info("RemoteSynchronizer starting")
        return self.pull()

    def resync(self) -> SyncStatus:
        """User-triggered resynchronization."""
        return self.pull()

    def pull(self) -> SyncStatus:
        """
        Fetch every remote collection and replace the store contents.

        Returns:
            The status after this pull was applied (or discarded as stale)
        """
        with self._lock:
            self._pull_ticket += 1
            ticket = self._pull_ticket
            self._state.last_pull = datetime.now()
        self._set_status(SyncStatus.PULLING)

        try:
            equipment = [Equipment.from_dict(row) for row in self.client.get_all()]
            customers = [Customer.from_dict(row) for row in self.client.get_customers()]
        except RemoteUnavailableError as e:
            logger.warning(f"Pull failed, falling back to local mirror: {e}")
            return self._apply_fallback(ticket, e)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Pull returned unusable data, falling back to local mirror: {e}")
            return self._apply_fallback(ticket, e)

        return self._apply_remote(ticket, equipment, customers)

    def _is_stale(self, ticket: int) -> bool:
        if ticket < self._applied_ticket:
            self._state.stale_pulls_discarded += 1
            logger.info(f"Discarding pull #{ticket}: pull #{self._applied_ticket} already applied")
            return True
        self._applied_ticket = ticket
        return False

    def _apply_remote(self, ticket: int, equipment: List[Equipment], customers: List[Customer]) -> SyncStatus:
        with self._lock:
            if self._is_stale(ticket):
                return self._state.status
            self.store.replace_all(EntityKind.EQUIPMENT, equipment)
            self.store.replace_all(EntityKind.CUSTOMER, customers)
            self._state.last_sync_success = datetime.now()
            self._state.last_error = None

        for kind in self.REMOTE_KINDS:
            self._mirror(kind)

        logger.info(f"Pull #{ticket} applied: {len(equipment)} equipment, {len(customers)} customers")
        self._set_status(SyncStatus.SYNCED)
        return SyncStatus.SYNCED

    def _apply_fallback(self, ticket: int, error: Exception) -> SyncStatus:
        with self._lock:
            if self._is_stale(ticket):
                return self._state.status
            for kind in self.REMOTE_KINDS:
                items = self.mirror.load(kind)
                if items is not None:
                    self.store.replace_all(kind, items)
                else:
                    logger.info(f"No mirrored {kind.value} collection, keeping current contents")
            self._state.last_error = str(error)

        self._set_status(SyncStatus.OFFLINE)
        return SyncStatus.OFFLINE

    # =========================================================================
    # OPTIMISTIC MUTATIONS
    # =========================================================================

    def add_equipment(self, fields: Union[EquipmentFields, Mapping[str, Any]]) -> Equipment:
        equipment = self.store.add_equipment(fields)
        payload = equipment.to_dict()
        self._mirror(EntityKind.EQUIPMENT)
        self._push("add_equipment", self.client.add_equipment, payload)
        return equipment

    def add_customer(self, fields: Union[CustomerFields, Mapping[str, Any]]) -> Customer:
        customer = self.store.add_customer(fields)
        payload = customer.to_dict()
        self._mirror(EntityKind.CUSTOMER)
        self._push("add_customer", self.client.add_customer, payload)
        return customer

    def add_supplier(self, fields: Union[SupplierFields, Mapping[str, Any]]) -> Supplier:
        supplier = self.store.add_supplier(fields)
        self._mirror(EntityKind.SUPPLIER)
        logger.debug(f"Supplier {supplier.id} kept local (suppliers are not synchronized)")
        return supplier

    def add_service_record(
        self,
        equipment_id: str,
        fields: Union[ServiceRecordFields, Mapping[str, Any]],
        new_status: Union[EquipmentStatus, str],
    ) -> ServiceRecord:
        """
        Raises:
            ReferentialIntegrityError: unknown equipment; nothing is mirrored or pushed
        """
        record = self.store.add_service_record(equipment_id, fields, new_status)
        self._mirror(EntityKind.EQUIPMENT)
        self._push(
            "add_service",
            self.client.add_service,
            record.to_dict(),
            EquipmentStatus.parse(new_status),
        )
        return record

    def _mirror(self, kind: EntityKind) -> bool:
        if self.mirror.save(kind, self.store.get(kind)):
            return True
        with self._lock:
            self._state.mirror_failures += 1
            self._state.last_error = f"Local mirror write failed for {kind.value}"
        return False

    # =========================================================================
    # PUSH
    # =========================================================================

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.PUSH_WORKERS,
                thread_name_prefix="SyncPush",
            )
        return self._executor

    def _push(self, action: str, func: Callable[..., bool], *args) -> None:
        if not self.background_pushes:
            self._run_push(action, func, *args)
            return

        future = self._get_executor().submit(self._run_push, action, func, *args)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _run_push(self, action: str, func: Callable[..., bool], *args) -> bool:
        try:
            func(*args)
        except RemoteUnavailableError as e:
            with self._lock:
                self._state.pushes_failed += 1
            logger.warning(f"Push {action} not confirmed, kept locally: {e}")
            return False
        except Exception as e:
            with self._lock:
                self._state.pushes_failed += 1
            logger.error(f"Push {action} crashed: {e}", exc_info=True)
            return False

        with self._lock:
            self._state.pushes_confirmed += 1
        logger.debug(f"Push {action} confirmed")
        return True

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for outstanding pushes.

        Returns:
            True if none are left outstanding
        """
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_pushes: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait_for_pushes)
            self._executor = None
        logger.info("RemoteSynchronizer stopped")

    # =========================================================================
    # CALLBACKS / STATUS
    # =========================================================================

    def _set_status(self, status: SyncStatus) -> None:
        with self._lock:
            old_status = self._state.status
            self._state.status = status
        if old_status != status:
            logger.info(f"Sync status changed: {old_status.value} -> {status.value}")
            self._notify_callbacks()

    def register_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Register a callback for sync status changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[SyncState], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in self._callbacks:
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in sync callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for UI display."""
        state = self._state
        return {
            "status": state.status.value,
            "is_online": self.is_online,
            "last_pull": state.last_pull.isoformat() if state.last_pull else None,
            "last_success": state.last_sync_success.isoformat() if state.last_sync_success else None,
            "pending_pushes": self.pending_push_count,
            "pushes_confirmed": state.pushes_confirmed,
            "pushes_failed": state.pushes_failed,
            "mirror_failures": state.mirror_failures,
            "stale_pulls_discarded": state.stale_pulls_discarded,
            "error": state.last_error,
        }
