# app/hub/session.py
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from app.models.user import Identity


@dataclass(frozen=True)
class AuthState:
    """(현재 사용자 | None, 로딩 중 여부, 오류) 세 값으로 이루어진 인증 상태."""
    identity: Optional[Identity] = None
    loading: bool = True
    error: Optional[str] = None


AuthListener = Callable[[AuthState], None]


class IdentityProvider:
    """
    인증 상태를 보관하고 변경을 구독자에게 알리는 관찰 가능한 객체.
    구독 즉시 현재 상태를 한 번 전달합니다 (Firebase onAuthStateChanged와 동일).
    """

    def __init__(self, state: Optional[AuthState] = None):
        self._state = state or AuthState()
        self._listeners: Dict[str, AuthListener] = {}
        self._lock = threading.Lock()

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        return self._state.identity

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        token = uuid.uuid4().hex
        with self._lock:
            self._listeners[token] = listener
        listener(self._state)

        def unsubscribe():
            with self._lock:
                self._listeners.pop(token, None)
        return unsubscribe

    def _publish(self, state: AuthState) -> None:
        with self._lock:
            self._state = state
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(state)
            except Exception as e:
                logging.error(f"Auth state listener failed: {e}", exc_info=True)

    def start_loading(self) -> None:
        self._publish(AuthState(identity=self._state.identity, loading=True))

    def sign_in(self, identity: Identity) -> None:
        self._publish(AuthState(identity=identity, loading=False))

    def sign_out(self) -> None:
        self._publish(AuthState(identity=None, loading=False))

    def fail(self, error: str) -> None:
        self._publish(AuthState(identity=None, loading=False, error=error))
