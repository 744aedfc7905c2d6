# app/api/replies/services.py

import logging
from typing import Optional, List

from app.core.context import FanHubContext
from app.core.exceptions import AuthenticationRequiredError, NotAuthorizedError, ResourceNotFoundError
from app.models.post import Post, Reply, replies_path
from app.models.user import Identity
from app.store.base import QuerySpec, SERVER_TIMESTAMP
from app.utils.datetime_utils import DateTimeUtils


class ReplyService:
    """
    댓글(reply) 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 댓글은 게시글의 'replies' 하위 컬렉션에 추가 전용으로 기록됩니다.
    - 게시글 작성자가 아닌 사람이 댓글을 달면 알림을 생성합니다.
    """
    def __init__(self, context: FanHubContext):
        self.store = context.store
        self.events = context.events

    def list_replies(self, post_id: str) -> List[Reply]:
        """게시글의 댓글 목록을 작성 시간 오름차순으로 조회합니다."""
        spec = QuerySpec(replies_path(post_id), order_by="createdAt", descending=False)
        return [Reply.from_document(post_id, doc.id, doc.to_dict()) for doc in self.store.query(spec)]

    def get_reply(self, post_id: str, reply_id: str) -> Optional[Reply]:
        doc = self.store.get(f"{replies_path(post_id)}/{reply_id}")
        if not doc.exists:
            return None
        return Reply.from_document(post_id, doc.id, doc.to_dict())

    def add_reply(self, identity: Optional[Identity], post: Post, text: str) -> Reply:
        """
        새 댓글을 저장하고 알림을 트리거합니다.
        반환되는 Reply의 created_at은 서버 시간이 아닌 클라이언트 근사값입니다.
        """
        if identity is None:
            raise AuthenticationRequiredError("You must be logged in to reply.")
        text = (text or "").strip()
        if not text:
            raise ValueError("Reply cannot be empty.")

        reply = Reply(reply_id="", post_id=post.post_id, text=text, author=identity.snapshot())
        data = reply.to_document()
        data["createdAt"] = SERVER_TIMESTAMP

        reply.reply_id = self.store.add(replies_path(post.post_id), data)
        reply.created_at = DateTimeUtils.now()
        logging.info(f"Reply created: {reply.reply_id} on post {post.post_id} by {identity.user_id}")

        if identity.user_id != post.author.user_id:
            self.events.emit_reply(identity.snapshot(), post, reply)

        return reply

    def delete_reply(self, identity: Optional[Identity], post: Post, reply_id: str) -> None:
        """댓글을 삭제합니다. (댓글 작성자 또는 게시글 작성자만 가능)"""
        if identity is None:
            raise AuthenticationRequiredError("You must be logged in to delete replies.")

        reply = self.get_reply(post.post_id, reply_id)
        if reply is None:
            raise ResourceNotFoundError("Reply not found.")
        if identity.user_id not in (reply.author.user_id, post.author.user_id):
            raise NotAuthorizedError("You are not authorized to delete this reply.")

        self.store.delete(f"{replies_path(post.post_id)}/{reply_id}")
        logging.info(f"Reply deleted: {reply_id} on post {post.post_id} by {identity.user_id}")
