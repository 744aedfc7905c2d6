# app/api/notifications/services.py
import logging
from typing import Callable, Iterable, List, Optional

from app.core.context import FanHubContext
from app.core.exceptions import ResourceNotFoundError
from app.models.notification import Notification, notifications_path
from app.store.base import QuerySpec, Subscription


def count_unread(notifications: Iterable[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)


class NotificationService:
    """
    수신자 입장의 알림 조회/읽음 처리 서비스.
    알림 생성은 NotificationEmitter가 담당합니다.
    """
    def __init__(self, context: FanHubContext):
        self.store = context.store
        self.limit = context.notification_limit

    def _spec(self, user_id: str, limit: Optional[int]) -> QuerySpec:
        return QuerySpec(
            notifications_path(user_id),
            order_by="createdAt", descending=True,
            limit=limit or self.limit,
        )

    def _to_models(self, user_id: str, docs) -> List[Notification]:
        return [Notification.from_document(user_id, doc.id, doc.to_dict()) for doc in docs]

    def list_notifications(self, user_id: str, limit: Optional[int] = None) -> List[Notification]:
        """최신 알림 N개 (createdAt 내림차순)."""
        return self._to_models(user_id, self.store.query(self._spec(user_id, limit)))

    def subscribe(self, user_id: str, callback: Callable[[List[Notification]], None],
                  limit: Optional[int] = None) -> Subscription:
        """알림 목록이 바뀔 때마다 callback(최신 N개)을 호출하는 실시간 구독."""
        return self.store.watch(
            self._spec(user_id, limit),
            lambda docs: callback(self._to_models(user_id, docs)),
        )

    def mark_read(self, user_id: str, notification_id: str) -> None:
        path = f"{notifications_path(user_id)}/{notification_id}"
        if not self.store.get(path).exists:
            raise ResourceNotFoundError("Notification not found.")
        self.store.update(path, {"read": True})

    def mark_all_read(self, user_id: str, notification_ids: Optional[List[str]] = None) -> int:
        """
        읽지 않은 알림을 하나의 배치로 읽음 처리하고 처리 개수를 반환합니다.
        notification_ids가 없으면 현재 보이는 최신 N개 중 읽지 않은 알림을 대상으로 합니다.
        """
        if notification_ids is None:
            notification_ids = [n.notification_id for n in self.list_notifications(user_id) if not n.read]
        if not notification_ids:
            return 0
        updates = [(f"{notifications_path(user_id)}/{nid}", {"read": True}) for nid in notification_ids]
        self.store.batch_update(updates)
        logging.info(f"Marked {len(updates)} notifications as read for {user_id}")
        return len(updates)
