"""
Sync -- reconcile the local quote store with a remote feed.

Server wins by default. Every divergence leaves a conflict behind
so the user can take the local value back.
"""

from .conflicts import ConflictResolver
from .engine import SyncEngine
from .fingerprint import fingerprint
from .reconciler import Reconciler, ReconcileResult
from .remote import PlaceholderBackend, RemoteBackend, RemoteError

__all__ = [
    "ConflictResolver",
    "PlaceholderBackend",
    "Reconciler",
    "ReconcileResult",
    "RemoteBackend",
    "RemoteError",
    "SyncEngine",
    "fingerprint",
]
