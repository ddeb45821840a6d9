"""Remote document store bridges.

Every bridge implements :class:`RemoteStore`: one-shot fetch, merge
persist, and a live :class:`Subscription` on the shared AppState
document.
"""

from propsync.remote.base import RemoteStore, Subscription, SubscriptionState
from propsync.remote.firestore import FirestoreBridge
from propsync.remote.memory import MemoryDocumentStore

__all__ = [
    "FirestoreBridge",
    "MemoryDocumentStore",
    "RemoteStore",
    "Subscription",
    "SubscriptionState",
]
