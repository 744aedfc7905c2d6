# app/hub/post_detail.py
import logging
import threading
from typing import Callable, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from app.api.posts.services import PostService
from app.api.replies.services import ReplyService
from app.hub.interaction import PostInteractionEngine
from app.hub.session import IdentityProvider
from app.hub.toasts import Toaster

# 알림으로 진입한 댓글을 강조 표시하는 시간
HIGHLIGHT_SECONDS = 3.0


def parse_deep_link(path: str) -> Tuple[Optional[str], Optional[str]]:
    """'/post/{postId}?replyId={replyId}' 형식의 경로를 (post_id, reply_id)로 분해합니다."""
    parts = urlsplit(path or "")
    segments = [s for s in parts.path.split("/") if s]
    if len(segments) != 2 or segments[0] != "post":
        return None, None
    reply_id = parse_qs(parts.query).get("replyId", [None])[0] or None
    return segments[1], reply_id


def _daemon_timer(seconds: float, fn: Callable[[], None]):
    timer = threading.Timer(seconds, fn)
    timer.daemon = True
    return timer


class PostDetailView:
    """
    게시물 상세 화면 상태.
    게시물이 없으면 토스트 없이 not_found로 표시하고,
    reply_id가 주어지면 해당 댓글을 HIGHLIGHT_SECONDS 동안 강조합니다.
    """

    def __init__(self,
                 post_service: PostService,
                 reply_service: ReplyService,
                 identity_provider: IdentityProvider,
                 toaster: Toaster,
                 timer_factory: Callable = _daemon_timer):
        self.post_service = post_service
        self.reply_service = reply_service
        self.identity_provider = identity_provider
        self.toaster = toaster
        self.timer_factory = timer_factory

        self.engine: Optional[PostInteractionEngine] = None
        self.loading = False
        self.not_found = False
        self.error: Optional[str] = None
        self.highlighted_reply_id: Optional[str] = None
        self._timer = None

    def load(self, post_id: str, reply_id: Optional[str] = None) -> bool:
        self.close()
        self.engine = None
        self.not_found = False
        self.error = None
        self.loading = True
        try:
            post = self.post_service.get_post(post_id)
        except Exception as e:
            logging.error(f"Error fetching post {post_id}: {e}", exc_info=True)
            self.error = "Failed to load post."
            return False
        finally:
            self.loading = False

        if post is None:
            self.not_found = True
            return False

        self.engine = PostInteractionEngine(
            post,
            self.post_service,
            self.reply_service,
            self.identity_provider,
            self.toaster,
            on_post_deleted=self._on_deleted,
        )
        self.engine.refresh_like_status()
        self.engine.replies_expanded = True
        self.engine.load_replies()

        if reply_id:
            self.focus_reply(reply_id)
        return True

    def open_link(self, path: str) -> bool:
        post_id, reply_id = parse_deep_link(path)
        if not post_id:
            self.not_found = True
            return False
        return self.load(post_id, reply_id)

    def focus_reply(self, reply_id: str) -> bool:
        """불러온 댓글 중에 reply_id가 있을 때만 강조하고 타이머를 겁니다."""
        if self.engine is None:
            return False
        if not any(r.reply_id == reply_id for r in self.engine.replies):
            logging.debug(f"Highlight target reply {reply_id} not found")
            return False
        self._cancel_timer()
        self.highlighted_reply_id = reply_id
        self._timer = self.timer_factory(HIGHLIGHT_SECONDS, self.clear_highlight)
        self._timer.start()
        return True

    def clear_highlight(self) -> None:
        self.highlighted_reply_id = None
        self._timer = None

    def _on_deleted(self, post_id: str) -> None:
        self.not_found = True
        self.engine = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def close(self) -> None:
        self._cancel_timer()
        self.highlighted_reply_id = None
