# app/models/notification.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional

from app.models.post import AuthorSnapshot


class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스"""
    LIKE = "like"
    REPLY = "reply"


@dataclass
class Notification:
    """
    'users/{recipient_id}/notifications' 하위 컬렉션 문서 구조.
    수신자 본인이 행위자인 알림은 만들지 않습니다.
    """
    notification_id: str
    recipient_id: str
    type: NotificationType
    actor: AuthorSnapshot
    post_id: str
    post_title_snippet: Optional[str] = None
    reply_text_snippet: Optional[str] = None
    reply_id: Optional[str] = None
    read: bool = False
    created_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        doc = {
            "type": self.type.value,
            "postId": self.post_id,
            "postTitleSnippet": self.post_title_snippet,
            "read": self.read,
            "createdAt": self.created_at,
        }
        doc.update(self.actor.to_fields(prefix='actor'))
        # reply 알림에만 존재하는 필드
        if self.reply_id is not None:
            doc["replyId"] = self.reply_id
            doc["replyTextSnippet"] = self.reply_text_snippet
        return doc

    @classmethod
    def from_document(cls, recipient_id: str, notification_id: str, data: Dict[str, Any]) -> "Notification":
        return cls(
            notification_id=notification_id,
            recipient_id=recipient_id,
            type=NotificationType(data.get("type", "like")),
            actor=AuthorSnapshot.from_fields(data, prefix='actor'),
            post_id=data.get("postId", ""),
            post_title_snippet=data.get("postTitleSnippet"),
            reply_text_snippet=data.get("replyTextSnippet"),
            reply_id=data.get("replyId"),
            read=bool(data.get("read", False)),
            created_at=data.get("createdAt"),
        )

    def deep_link(self) -> str:
        """알림 클릭 시 이동할 게시물 상세 경로. reply 알림은 해당 댓글을 강조합니다."""
        path = f"/post/{self.post_id}"
        if self.reply_id:
            path += f"?replyId={self.reply_id}"
        return path


def notifications_path(user_id: str) -> str:
    return f"users/{user_id}/notifications"
