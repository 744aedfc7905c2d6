# app/core/context.py
"""
프로세스 전역 Fan Hub 컨텍스트.

저장소/알림 발행기/업로드 게이트웨이를 한 번만 초기화하고,
서비스와 hub 객체에는 이 컨텍스트를 명시적으로 주입합니다.
테스트에서는 reset_context() 후 MemoryDocumentStore로 다시 초기화합니다.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from app.services.notification_service import NotificationEmitter, StoreNotificationEmitter
from app.services.storage_service import StorageService
from app.store.base import DocumentStore


@dataclass(frozen=True)
class FanHubContext:
    store: DocumentStore
    events: NotificationEmitter
    uploads: Optional[StorageService] = None
    feed_limit: int = 20
    notification_limit: int = 20


_context: Optional[FanHubContext] = None
_lock = threading.Lock()


def init_context(store: DocumentStore,
                 events: Optional[NotificationEmitter] = None,
                 uploads: Optional[StorageService] = None,
                 feed_limit: int = 20,
                 notification_limit: int = 20) -> FanHubContext:
    """컨텍스트를 한 번만 생성합니다. 이미 있으면 RuntimeError."""
    global _context
    with _lock:
        if _context is not None:
            raise RuntimeError("FanHubContext is already initialized.")
        _context = FanHubContext(
            store=store,
            events=events or StoreNotificationEmitter(store),
            uploads=uploads,
            feed_limit=feed_limit,
            notification_limit=notification_limit,
        )
        logging.info(f"FanHubContext initialized with {type(store).__name__}")
        return _context


def get_context() -> FanHubContext:
    if _context is None:
        raise RuntimeError("FanHubContext is not initialized. Call init_context() first.")
    return _context


def reset_context() -> None:
    global _context
    with _lock:
        _context = None
