# =============================================================================
# clineng_core/offline/__init__.py
# Offline-tolerant persistence and synchronization
# =============================================================================
"""
Offline-Tolerant Synchronization

┌──────────────────────────────────────────────────────────────┐
│                      RemoteSynchronizer                        │
│        (pull on start / resync, optimistic mutations)         │
└──────────────────────────────────────────────────────────────┘
          │                    │                       │
          ▼                    ▼                       ▼
   ┌─────────────┐    ┌──────────────────┐    ┌────────────────┐
   │ EntityStore │    │ PersistenceMirror │    │ RemoteAPIClient │
   │  (memory)   │    │   (JSON slots)    │    │  (HTTP / JSON)  │
   └─────────────┘    └──────────────────┘    └────────────────┘

Usage:
------
from clineng_core.offline import RemoteSynchronizer, PersistenceMirror

sync = RemoteSynchronizer(store, mirror, client)
sync.start()                    # pull, or fall back to the mirror
sync.add_equipment(fields)      # visible now, pushed in the background
print(sync.status)              # SyncStatus.SYNCED / SyncStatus.OFFLINE
"""

from clineng_core.offline.persistence_mirror import PersistenceMirror
from clineng_core.offline.synchronizer import (
    RemoteSynchronizer,
    SyncState,
    SyncStatus,
)

__all__ = [
    "PersistenceMirror",
    "RemoteSynchronizer",
    "SyncState",
    "SyncStatus",
]
