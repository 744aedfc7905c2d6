# app/hub/__init__.py
"""
클라이언트 측 상태를 담는 hub 계층.

인증 상태, 토스트, 게시물 상호작용 엔진, 피드, 알림 센터, 게시물 상세 화면을
브라우저 없이 테스트할 수 있는 일반 파이썬 객체로 제공합니다.
"""
from .session import AuthState, IdentityProvider
from .toasts import Toast, ToastLevel, Toaster
from .interaction import PostInteractionEngine
from .feed import FeedView, PostFeedController
from .notification_center import NotificationCenter
from .post_detail import HIGHLIGHT_SECONDS, PostDetailView, parse_deep_link
