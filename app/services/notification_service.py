# app/services/notification_service.py
import logging
from abc import ABC, abstractmethod
from typing import Optional

from app.models.notification import Notification, NotificationType, notifications_path
from app.models.post import AuthorSnapshot, Post, Reply
from app.store.base import DocumentStore, SERVER_TIMESTAMP


class NotificationEmitter(ABC):
    """
    상호작용(좋아요/댓글) 후 알림을 발행하는 인터페이스.
    트랜잭션이 커밋된 뒤 동기적으로 호출됩니다. 구현체는 예외를 밖으로 던지지 않습니다.
    """

    def emit_like(self, actor: AuthorSnapshot, post: Post) -> Optional[str]:
        return self.emit(Notification(
            notification_id="",
            recipient_id=post.author.user_id,
            type=NotificationType.LIKE,
            actor=actor,
            post_id=post.post_id,
            post_title_snippet=post.title_snippet(),
        ))

    def emit_reply(self, actor: AuthorSnapshot, post: Post, reply: Reply) -> Optional[str]:
        return self.emit(Notification(
            notification_id="",
            recipient_id=post.author.user_id,
            type=NotificationType.REPLY,
            actor=actor,
            post_id=post.post_id,
            post_title_snippet=post.title_snippet(),
            reply_text_snippet=reply.text_snippet(),
            reply_id=reply.reply_id,
        ))

    @abstractmethod
    def emit(self, notification: Notification) -> Optional[str]:
        """알림을 기록하고 생성된 ID를 반환합니다. 건너뛰거나 실패하면 None."""


class StoreNotificationEmitter(NotificationEmitter):
    """
    수신자의 'users/{id}/notifications' 하위 컬렉션에 직접 쓰는 구현.
    서버 측 트리거(Cloud Functions)로 옮겨도 호출부 계약은 그대로 유지됩니다.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def emit(self, notification: Notification) -> Optional[str]:
        if not notification.recipient_id:
            logging.warning(f"알림 수신자가 없어 건너뜀 (post_id: {notification.post_id})")
            return None
        if notification.recipient_id == notification.actor.user_id:
            return None  # 자기 자신에게는 알림을 생성하지 않음

        try:
            data = notification.to_document()
            data["createdAt"] = SERVER_TIMESTAMP
            data["read"] = False
            notification_id = self.store.add(notifications_path(notification.recipient_id), data)
            logging.info(f"{notification.type.value} notification created: {notification.actor.user_id} -> {notification.recipient_id}")
            return notification_id
        except Exception as e:
            logging.error(f"알림 생성 중 오류 발생 (recipient: {notification.recipient_id}): {e}", exc_info=True)
            return None
