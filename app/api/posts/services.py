# app/api/posts/services.py
import logging
from typing import Optional, List, Iterable, Set

from app.core.context import FanHubContext
from app.core.exceptions import (
    AuthenticationRequiredError, LikeConflictError, NotAuthorizedError,
    ResourceNotFoundError, describe_error,
)
from app.models.interaction import InteractionResult, LikeState
from app.models.post import LikeMarker, Post, like_path, post_path
from app.models.user import Identity
from app.store.base import Increment, QuerySpec, SERVER_TIMESTAMP, Transaction

LIKE_FAILED_MESSAGE = "Failed to update like status."


class PostService:
    """
    게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    저장소와 알림 발행기는 FanHubContext로 주입받습니다.
    """
    def __init__(self, context: FanHubContext):
        self.store = context.store
        self.events = context.events
        self.feed_limit = context.feed_limit

    def create_post(self, identity: Optional[Identity], title: str, description: str,
                    link: Optional[str] = None, image_url: Optional[str] = None) -> Post:
        """새로운 게시글을 생성합니다. 제목과 본문 중 하나는 반드시 있어야 합니다."""
        if identity is None:
            raise AuthenticationRequiredError("You must be logged in to create a post.")

        title = (title or "").strip()
        description = (description or "").strip()
        if not title and not description:
            raise ValueError("Please provide at least a title or description.")

        post = Post(
            post_id="",
            author=identity.snapshot(),
            title=title,
            description=description,
            link=(link or "").strip() or None,
            image_url=image_url or None,
            likes=0,
        )
        data = post.to_document()
        data["createdAt"] = SERVER_TIMESTAMP

        try:
            post.post_id = self.store.add("posts", data)
        except Exception as e:
            logging.error(f"게시글 생성 실패 (user_id: {identity.user_id}): {e}", exc_info=True)
            raise

        logging.info(f"Post created: {post.post_id} by {identity.user_id}")
        # createdAt은 서버가 채우므로 저장된 문서를 다시 읽어 반환
        return self.get_post(post.post_id) or post

    def get_post(self, post_id: str) -> Optional[Post]:
        doc = self.store.get(post_path(post_id))
        if not doc.exists:
            return None
        return Post.from_document(doc.id, doc.to_dict())

    def get_recent_posts(self, limit: Optional[int] = None) -> List[Post]:
        """모든 작성자의 최신 게시글 N개 (createdAt 내림차순)."""
        spec = QuerySpec("posts", order_by="createdAt", descending=True, limit=limit or self.feed_limit)
        return [Post.from_document(doc.id, doc.to_dict()) for doc in self.store.query(spec)]

    def get_posts_by_author(self, author_id: str, limit: Optional[int] = None) -> List[Post]:
        """특정 사용자가 작성한 최신 게시글 N개."""
        spec = QuerySpec(
            "posts",
            filters=[("authorId", "==", author_id)],
            order_by="createdAt", descending=True,
            limit=limit or self.feed_limit,
        )
        return [Post.from_document(doc.id, doc.to_dict()) for doc in self.store.query(spec)]

    def count_posts_by_author(self, author_id: str) -> int:
        try:
            return len(self.store.query(QuerySpec("posts", filters=[("authorId", "==", author_id)])))
        except Exception as e:
            logging.error(f"사용자 게시물 수 집계 실패 (author_id: {author_id}): {e}", exc_info=True)
            return 0

    def is_liked(self, post_id: str, user_id: Optional[str]) -> bool:
        if not user_id:
            return False
        return self.store.get(like_path(post_id, user_id)).exists

    def liked_post_ids(self, user_id: Optional[str], post_ids: Iterable[str]) -> Set[str]:
        """주어진 게시글 목록에 대해 사용자의 좋아요 여부를 일괄 확인합니다."""
        if not user_id:
            return set()
        return {post_id for post_id in post_ids if self.is_liked(post_id, user_id)}

    def apply_like(self, identity: Optional[Identity], post: Post, previous: LikeState) -> InteractionResult:
        """
        previous(클릭 직전 상태)를 토글하는 트랜잭션을 실행합니다.

        - 마커 있음 + 취소 의도 -> 마커 삭제, likes -1
        - 마커 없음 + 좋아요 의도 -> 마커 생성, likes +1
        - 그 외 조합은 충돌로 보고 아무것도 쓰지 않습니다 (자동 재시도 없음).
        확정 시 new_state의 likes는 클라이언트 값이 아니라 저장된 카운터 기준입니다.
        """
        if identity is None:
            raise AuthenticationRequiredError("You must be logged in to like posts.")

        wants_like = not previous.liked
        marker_path = like_path(post.post_id, identity.user_id)
        target_path = post_path(post.post_id)

        def _toggle_in_transaction(transaction: Transaction):
            target = transaction.get(target_path)
            if not target.exists:
                raise ResourceNotFoundError("Post not found.")
            marker = transaction.get(marker_path)
            stored = target.to_dict().get("likes") or 0
            if marker.exists and not wants_like:
                transaction.delete(marker_path)
                # 카운터는 0 아래로 내려가지 않음
                if stored > 0:
                    transaction.update(target_path, {"likes": Increment(-1)})
                return LikeState(liked=False, likes=max(0, stored - 1))
            if not marker.exists and wants_like:
                transaction.set(marker_path, LikeMarker(user_id=identity.user_id).to_document())
                transaction.update(target_path, {"likes": Increment(1)})
                return LikeState(liked=True, likes=stored + 1)
            raise LikeConflictError("Like state mismatch")

        try:
            committed = self.store.run_transaction(_toggle_in_transaction)
        except LikeConflictError as e:
            logging.warning(f"좋아요 상태 불일치로 롤백 (user_id: {identity.user_id}, post_id: {post.post_id})")
            return InteractionResult.rollback(e.message, previous)
        except Exception as e:
            logging.error(f"게시글 좋아요 토글 실패 (user_id: {identity.user_id}, post_id: {post.post_id}): {e}", exc_info=True)
            return InteractionResult.rollback(describe_error(e, LIKE_FAILED_MESSAGE), previous)

        # 새로운 좋아요인 경우에만 알림 생성 (취소는 알림 없음)
        if wants_like and identity.user_id != post.author.user_id:
            self.events.emit_like(identity.snapshot(), post)

        return InteractionResult.commit(committed)

    def delete_post(self, identity: Optional[Identity], post_id: str) -> None:
        """
        게시글 문서만 삭제합니다. (작성자 본인만 가능)
        likes/replies 하위 컬렉션은 남습니다. 정리는 서버 측 작업의 몫입니다.
        """
        if identity is None:
            raise AuthenticationRequiredError("You must be logged in to delete posts.")

        post = self.get_post(post_id)
        if post is None:
            raise ResourceNotFoundError("Post not found.")
        if post.author.user_id != identity.user_id:
            raise NotAuthorizedError("You are not authorized to delete this post.")

        self.store.delete(post_path(post_id))
        logging.info(f"Post deleted: {post_id} by {identity.user_id}")
