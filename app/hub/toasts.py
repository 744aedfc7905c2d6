# app/hub/toasts.py
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class ToastLevel(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Toast:
    level: ToastLevel
    message: str
    description: Optional[str] = None


class Toaster:
    """화면을 막지 않는 토스트 알림 큐. UI 계층이 messages를 꺼내 표시합니다."""

    def __init__(self):
        self.messages: List[Toast] = []
        self._lock = threading.Lock()

    def show(self, toast: Toast) -> None:
        with self._lock:
            self.messages.append(toast)
        if toast.level is ToastLevel.ERROR:
            logging.info(f"Toast error: {toast.message} ({toast.description or '-'})")

    def success(self, message: str, description: Optional[str] = None) -> None:
        self.show(Toast(ToastLevel.SUCCESS, message, description))

    def error(self, message: str, description: Optional[str] = None) -> None:
        self.show(Toast(ToastLevel.ERROR, message, description))

    @property
    def last(self) -> Optional[Toast]:
        return self.messages[-1] if self.messages else None

    def errors(self) -> List[str]:
        return [t.message for t in self.messages if t.level is ToastLevel.ERROR]

    def clear(self) -> None:
        with self._lock:
            self.messages.clear()
