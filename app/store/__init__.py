# app/store/__init__.py
from .base import (
    DocumentSnapshot, DocumentStore, Increment, QuerySpec,
    SERVER_TIMESTAMP, Subscription, Transaction,
)
from .memory_store import MemoryDocumentStore

__all__ = [
    'DocumentSnapshot', 'DocumentStore', 'Increment', 'QuerySpec',
    'SERVER_TIMESTAMP', 'Subscription', 'Transaction',
    'MemoryDocumentStore',
]
