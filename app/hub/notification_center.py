# app/hub/notification_center.py
import logging
import threading
from typing import List, Optional

from app.api.notifications.services import NotificationService, count_unread
from app.hub.session import AuthState, IdentityProvider
from app.hub.toasts import Toaster
from app.models.notification import Notification
from app.store.base import Subscription


class NotificationCenter:
    """
    현재 사용자의 최신 알림 N개를 실시간 구독으로 유지합니다 (폴링 없음).
    unread_count는 갱신마다 items에서 다시 계산되는 파생 값입니다.
    사용자가 없어지면 구독을 해제합니다.
    """

    def __init__(self,
                 notification_service: NotificationService,
                 identity_provider: IdentityProvider,
                 toaster: Optional[Toaster] = None,
                 limit: Optional[int] = None):
        self.notification_service = notification_service
        self.toaster = toaster
        self.limit = limit

        self.items: List[Notification] = []
        self.unread_count = 0

        self._user_id: Optional[str] = None
        self._subscription: Optional[Subscription] = None
        self._lock = threading.RLock()
        self._unsubscribe_auth = identity_provider.subscribe(self._on_auth_state)

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    def _on_auth_state(self, state: AuthState) -> None:
        if state.loading:
            return
        user_id = state.identity.user_id if state.identity else None
        with self._lock:
            if user_id == self._user_id and (user_id is None or self._subscription is not None):
                return
            self._stop()
            if user_id is None:
                return
            self._user_id = user_id
            try:
                self._subscription = self.notification_service.subscribe(
                    user_id,
                    lambda items, uid=user_id: self._on_update(uid, items),
                    limit=self.limit,
                )
            except Exception as e:
                logging.error(f"알림 구독 시작 실패 (user_id: {user_id}): {e}", exc_info=True)
                self._user_id = None

    def _on_update(self, user_id: str, items: List[Notification]) -> None:
        with self._lock:
            # 이전 사용자의 구독에서 늦게 도착한 스냅샷은 무시
            if user_id != self._user_id:
                return
            self.items = list(items)
            self.unread_count = count_unread(self.items)

    def _stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
        self._subscription = None
        self._user_id = None
        self.items = []
        self.unread_count = 0

    # --- 읽음 처리 ---
    def mark_read(self, notification_id: str) -> bool:
        user_id = self._user_id
        if not user_id:
            return False
        try:
            self.notification_service.mark_read(user_id, notification_id)
            return True
        except Exception as e:
            logging.error(f"알림 읽음 처리 실패 ({notification_id}): {e}", exc_info=True)
            if self.toaster:
                self.toaster.error("Failed to update notification.")
            return False

    def mark_all_read(self) -> int:
        """현재 보이는 알림 중 읽지 않은 것을 하나의 배치로 읽음 처리합니다."""
        user_id = self._user_id
        if not user_id:
            return 0
        unread_ids = [n.notification_id for n in self.items if not n.read]
        if not unread_ids:
            return 0
        try:
            return self.notification_service.mark_all_read(user_id, unread_ids)
        except Exception as e:
            logging.error(f"알림 일괄 읽음 처리 실패 (user_id: {user_id}): {e}", exc_info=True)
            if self.toaster:
                self.toaster.error("Failed to mark notifications as read.")
            return 0

    def open(self, notification_id: str) -> Optional[str]:
        """알림을 클릭했을 때: 읽음 처리 후 이동할 딥 링크 경로를 반환합니다."""
        notification = next((n for n in self.items if n.notification_id == notification_id), None)
        if notification is None:
            return None
        if not notification.read:
            self.mark_read(notification_id)
        return notification.deep_link()

    def close(self) -> None:
        self._unsubscribe_auth()
        with self._lock:
            self._stop()
