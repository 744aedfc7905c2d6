# app/hub/interaction.py
"""
게시물 카드 하나의 상호작용 상태 머신.

좋아요:  idle -> pending -> {committed | rolled-back} -> idle
댓글 패널: collapsed -> loading -> {loaded | error(collapsed)}

로컬 상태는 백엔드 응답 전에 먼저 바뀌고(낙관적 갱신),
InteractionResult에 따라 확정되거나 이전 값으로 되돌아갑니다.
바쁨 플래그는 작업 종류별(좋아요/댓글/삭제/댓글 로딩)로 따로 두며 인스턴스 간에 공유하지 않습니다.
"""
import logging
import threading
from typing import Callable, List, Optional

from app.api.posts.services import LIKE_FAILED_MESSAGE, PostService
from app.api.replies.services import ReplyService
from app.core.exceptions import NotAuthorizedError, ResourceNotFoundError, describe_error
from app.hub.session import IdentityProvider
from app.hub.toasts import Toaster
from app.models.interaction import InteractionResult, LikeState, state_after
from app.models.post import Post, Reply


class PostInteractionEngine:

    def __init__(self,
                 post: Post,
                 post_service: PostService,
                 reply_service: ReplyService,
                 identity_provider: IdentityProvider,
                 toaster: Toaster,
                 on_like_updated: Optional[Callable[[], None]] = None,
                 on_post_deleted: Optional[Callable[[str], None]] = None):
        self.post = post
        self.post_service = post_service
        self.reply_service = reply_service
        self.identity_provider = identity_provider
        self.toaster = toaster
        self.on_like_updated = on_like_updated
        self.on_post_deleted = on_post_deleted

        self.like_state = LikeState(liked=False, likes=post.likes)
        # 클릭마다 증가하는 시각적 확인(pulse) 카운터. 백엔드 결과와 무관합니다.
        self.pulse_count = 0

        self.replies: List[Reply] = []
        self.replies_expanded = False
        self.replies_loading = False
        self.replies_fetched = False
        self.reply_draft = ""
        self.reply_input_open = False

        self.pending_delete_post = False
        self.pending_delete_reply_id: Optional[str] = None

        self._like_busy = threading.Lock()
        self._reply_busy = threading.Lock()
        self._delete_busy = threading.Lock()
        self._replies_busy = threading.Lock()

    # --- 상태 조회 ---
    @property
    def liked(self) -> bool:
        return self.like_state.liked

    @property
    def likes(self) -> int:
        return self.like_state.likes

    @property
    def like_pending(self) -> bool:
        return self._like_busy.locked()

    @property
    def submitting_reply(self) -> bool:
        return self._reply_busy.locked()

    @property
    def deleting(self) -> bool:
        return self._delete_busy.locked()

    @property
    def can_delete_post(self) -> bool:
        identity = self.identity_provider.identity
        return identity is not None and identity.user_id == self.post.author.user_id

    def can_delete_reply(self, reply: Reply) -> bool:
        identity = self.identity_provider.identity
        return identity is not None and identity.user_id in (reply.author.user_id, self.post.author.user_id)

    def sync_post(self, post: Post) -> None:
        """피드 재조회 결과를 반영합니다. 좋아요 처리 중에는 카운터를 덮어쓰지 않습니다."""
        self.post = post
        if not self.like_pending:
            self.like_state = LikeState(liked=self.like_state.liked, likes=post.likes)

    def refresh_like_status(self) -> None:
        """현재 사용자의 좋아요 마커 존재 여부로 liked를 초기화합니다."""
        identity = self.identity_provider.identity
        if identity is None:
            self.like_state = LikeState(liked=False, likes=self.like_state.likes)
            return
        try:
            liked = self.post_service.is_liked(self.post.post_id, identity.user_id)
        except Exception as e:
            logging.error(f"좋아요 상태 조회 실패 (post_id: {self.post.post_id}): {e}", exc_info=True)
            return
        self.like_state = LikeState(liked=liked, likes=self.like_state.likes)

    # --- 좋아요 ---
    def toggle_like(self) -> Optional[InteractionResult]:
        """
        좋아요/취소를 토글합니다.
        로그인하지 않았거나 이전 요청이 진행 중이면 아무것도 하지 않고 None을 반환합니다.
        """
        identity = self.identity_provider.identity
        if identity is None:
            self.toaster.error("You must be logged in to like posts.")
            return None
        if not self._like_busy.acquire(blocking=False):
            return None

        try:
            self.pulse_count += 1
            previous = self.like_state
            self.like_state = previous.toggled()

            try:
                result = self.post_service.apply_like(identity, self.post, previous)
            except Exception as e:
                logging.error(f"Like transaction failed (post_id: {self.post.post_id}): {e}", exc_info=True)
                result = InteractionResult.rollback(describe_error(e, LIKE_FAILED_MESSAGE), previous)

            self.like_state = state_after(result)
            if not result.committed:
                self.toaster.error(LIKE_FAILED_MESSAGE, description=result.reason)
                return result

            self.post.likes = result.state.likes
            if self.on_like_updated:
                try:
                    self.on_like_updated()
                except Exception as e:
                    logging.error(f"on_like_updated callback failed: {e}", exc_info=True)
            return result
        finally:
            self._like_busy.release()

    # --- 댓글 ---
    def open_reply_input(self) -> None:
        self.reply_input_open = not self.reply_input_open
        self.reply_draft = ""

    def toggle_replies(self) -> None:
        """댓글 패널을 열고 닫습니다. 처음 열 때만 댓글을 불러옵니다."""
        self.replies_expanded = not self.replies_expanded
        if self.replies_expanded and not self.replies_fetched:
            self.load_replies()

    def load_replies(self) -> bool:
        """
        댓글을 최대 한 번만 불러옵니다.
        실패하면 패널을 닫고 가드를 풀어서 다시 열 때 재시도할 수 있게 합니다.
        """
        if not self._replies_busy.acquire(blocking=False):
            return False
        try:
            if self.replies_fetched:
                return False
            self.replies_fetched = True
            self.replies_loading = True
            try:
                self.replies = self.reply_service.list_replies(self.post.post_id)
            except Exception as e:
                logging.error(f"Error fetching replies for post {self.post.post_id}: {e}", exc_info=True)
                self.toaster.error("Failed to load replies.")
                self.replies_expanded = False
                self.replies_fetched = False
                return False
            logging.debug(f"Fetched {len(self.replies)} replies for post {self.post.post_id}")
            return True
        finally:
            self.replies_loading = False
            self._replies_busy.release()

    def submit_reply(self, text: Optional[str] = None) -> Optional[Reply]:
        """
        댓글을 작성합니다. 성공하면 다시 조회하지 않고 로컬 목록 끝에 추가합니다.
        실패하면 입력한 내용은 그대로 남겨 재시도할 수 있게 합니다.
        """
        if text is not None:
            self.reply_draft = text

        identity = self.identity_provider.identity
        if identity is None:
            self.toaster.error("You must be logged in to reply.")
            return None
        if not self.reply_draft.strip():
            self.toaster.error("Reply cannot be empty.")
            return None
        if not self._reply_busy.acquire(blocking=False):
            return None

        try:
            reply = self.reply_service.add_reply(identity, self.post, self.reply_draft)
        except Exception as e:
            logging.error(f"Error posting reply (post_id: {self.post.post_id}): {e}", exc_info=True)
            self.toaster.error(
                "Failed to post reply.",
                description=describe_error(e, "An unknown error occurred while posting reply."),
            )
            return None
        finally:
            self._reply_busy.release()

        self.toaster.success("Reply posted!")
        self.replies.append(reply)
        if not self.replies_expanded:
            self.replies_expanded = True
            self.replies_fetched = True
        self.reply_draft = ""
        self.reply_input_open = False
        return reply

    # --- 삭제 (2단계 확인) ---
    def request_delete_post(self) -> None:
        self.pending_delete_post = True

    def request_delete_reply(self, reply_id: str) -> None:
        self.pending_delete_reply_id = reply_id

    def cancel_delete(self) -> None:
        self.pending_delete_post = False
        self.pending_delete_reply_id = None

    def confirm_delete_post(self) -> bool:
        """확인된 삭제 의도가 있을 때만 게시글을 삭제합니다. 하위 컬렉션은 지우지 않습니다."""
        if not self.pending_delete_post:
            return False
        try:
            if not self.can_delete_post:
                self.toaster.error("You are not authorized to delete this post.")
                return False
            if not self._delete_busy.acquire(blocking=False):
                return False
            try:
                self.post_service.delete_post(self.identity_provider.identity, self.post.post_id)
            except NotAuthorizedError as e:
                self.toaster.error(e.message)
                return False
            except Exception as e:
                logging.error(f"Error deleting post {self.post.post_id}: {e}", exc_info=True)
                self.toaster.error("Failed to delete post.")
                return False
            finally:
                self._delete_busy.release()

            self.toaster.success("Post deleted successfully.")
            if self.on_post_deleted:
                self.on_post_deleted(self.post.post_id)
            return True
        finally:
            self.pending_delete_post = False

    def confirm_delete_reply(self) -> bool:
        """확인된 댓글 삭제. 댓글 작성자 또는 게시글 작성자만 가능합니다."""
        reply_id = self.pending_delete_reply_id
        if not reply_id:
            return False
        try:
            reply = next((r for r in self.replies if r.reply_id == reply_id), None)
            if reply is None:
                logging.warning(f"Reply {reply_id} is not in the loaded list (post_id: {self.post.post_id})")
                self.toaster.error("Reply not found.")
                return False
            if not self.can_delete_reply(reply):
                self.toaster.error("You are not authorized to delete this reply.")
                return False
            if not self._delete_busy.acquire(blocking=False):
                return False
            try:
                self.reply_service.delete_reply(self.identity_provider.identity, self.post, reply_id)
            except NotAuthorizedError as e:
                self.toaster.error(e.message)
                return False
            except ResourceNotFoundError as e:
                # 다른 곳에서 이미 삭제됨
                self.replies = [r for r in self.replies if r.reply_id != reply_id]
                self.toaster.error(e.message)
                return False
            except Exception as e:
                logging.error(f"Error deleting reply {reply_id}: {e}", exc_info=True)
                self.toaster.error("Failed to delete reply.")
                return False
            finally:
                self._delete_busy.release()

            self.replies = [r for r in self.replies if r.reply_id != reply_id]
            self.toaster.success("Reply deleted successfully.")
            return True
        finally:
            self.pending_delete_reply_id = None

    def post_link(self) -> str:
        return f"/post/{self.post.post_id}"
