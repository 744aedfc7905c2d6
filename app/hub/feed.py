# app/hub/feed.py
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.api.posts.services import PostService
from app.api.replies.services import ReplyService
from app.core.exceptions import describe_error
from app.hub.interaction import PostInteractionEngine
from app.hub.session import AuthState, IdentityProvider
from app.hub.toasts import Toaster
from app.models.post import Post


@dataclass
class FeedView:
    """피드 탭 하나의 상태. 탭마다 독립적으로 로딩/오류를 가집니다."""
    posts: List[Post] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None


class PostFeedController:
    """
    'explore'(전체 최신 N개)와 'mine'(내 글 최신 N개) 두 피드를 관리합니다.

    재조회 시점: 인증 상태 확정, 사용자 변경, refresh() 호출
    (게시글 작성/좋아요 후 자식 엔진의 콜백으로 호출됩니다).
    검색어 필터는 조회 이후 로컬에서만 적용하며 백엔드를 다시 조회하지 않습니다.
    """

    def __init__(self,
                 post_service: PostService,
                 reply_service: ReplyService,
                 identity_provider: IdentityProvider,
                 toaster: Toaster,
                 limit: Optional[int] = None):
        self.post_service = post_service
        self.reply_service = reply_service
        self.identity_provider = identity_provider
        self.toaster = toaster
        self.limit = limit

        self.explore = FeedView()
        self.mine = FeedView()
        self.search_term = ""
        self.engines: Dict[str, PostInteractionEngine] = {}

        self._resolved = False
        self._user_id: Optional[str] = None
        self._refresh_lock = threading.RLock()
        self._unsubscribe = identity_provider.subscribe(self._on_auth_state)

    def _on_auth_state(self, state: AuthState) -> None:
        if state.loading:
            return
        user_id = state.identity.user_id if state.identity else None
        if self._resolved and user_id == self._user_id:
            return
        self._resolved = True
        self._user_id = user_id
        # 사용자가 바뀌면 좋아요 상태가 달라지므로 엔진을 새로 만듭니다.
        self.engines = {}
        self.refresh()

    # --- 조회 ---
    def refresh(self) -> None:
        with self._refresh_lock:
            self._load_explore()
            self._load_mine()
            self._sync_engines()

    def _load_explore(self) -> None:
        view = self.explore
        view.loading = True
        view.error = None
        try:
            view.posts = self.post_service.get_recent_posts(self.limit)
        except Exception as e:
            logging.error(f"Error fetching explore posts: {e}", exc_info=True)
            view.error = describe_error(e, "Failed to load posts.")
        finally:
            view.loading = False

    def _load_mine(self) -> None:
        identity = self.identity_provider.identity
        if identity is None:
            self.mine = FeedView()
            return
        view = self.mine
        view.loading = True
        view.error = None
        try:
            view.posts = self.post_service.get_posts_by_author(identity.user_id, self.limit)
        except Exception as e:
            logging.error(f"Error fetching posts for {identity.user_id}: {e}", exc_info=True)
            view.error = describe_error(e, "Failed to load your posts.")
        finally:
            view.loading = False

    def _sync_engines(self) -> None:
        current = {p.post_id: p for p in self.explore.posts + self.mine.posts}
        for post_id in list(self.engines):
            if post_id not in current:
                del self.engines[post_id]
        for post_id, post in current.items():
            if post_id in self.engines:
                self.engines[post_id].sync_post(post)

    # --- 검색 ---
    def search(self, term: str) -> None:
        self.search_term = term or ""

    def visible(self, view: FeedView) -> List[Post]:
        return [post for post in view.posts if post.matches(self.search_term)]

    @property
    def visible_explore(self) -> List[Post]:
        return self.visible(self.explore)

    @property
    def visible_mine(self) -> List[Post]:
        return self.visible(self.mine)

    # --- 자식 엔진 ---
    def engine_for(self, post: Post) -> PostInteractionEngine:
        engine = self.engines.get(post.post_id)
        if engine is None:
            engine = PostInteractionEngine(
                post,
                self.post_service,
                self.reply_service,
                self.identity_provider,
                self.toaster,
                on_like_updated=self.refresh,
                on_post_deleted=self.remove_post,
            )
            engine.refresh_like_status()
            self.engines[post.post_id] = engine
        return engine

    def remove_post(self, post_id: str) -> None:
        """삭제된 게시글을 두 피드에서 모두 제거합니다."""
        self.explore.posts = [p for p in self.explore.posts if p.post_id != post_id]
        self.mine.posts = [p for p in self.mine.posts if p.post_id != post_id]
        self.engines.pop(post_id, None)

    # --- 작성 ---
    def create_post(self, title: str, description: str,
                    link: Optional[str] = None, image_url: Optional[str] = None) -> Optional[Post]:
        identity = self.identity_provider.identity
        if identity is None:
            self.toaster.error("You must be logged in to create a post.")
            return None
        try:
            post = self.post_service.create_post(identity, title, description, link=link, image_url=image_url)
        except ValueError as e:
            self.toaster.error(str(e))
            return None
        except Exception as e:
            logging.error(f"Error creating post: {e}", exc_info=True)
            self.toaster.error("Failed to create post.", description=describe_error(e, "Please try again."))
            return None
        self.toaster.success("Post created successfully!")
        self.refresh()
        return post

    def close(self) -> None:
        self._unsubscribe()
