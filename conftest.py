# conftest.py
"""
공용 pytest 픽스처.

외부 서비스(Firestore, Firebase Auth, Cloudinary) 없이 실행할 수 있도록
MemoryDocumentStore와 가짜 토큰 검증기를 주입합니다.
"""
import pytest

from app.api.notifications.services import NotificationService
from app.api.posts.services import PostService
from app.api.replies.services import ReplyService
from app.core.context import init_context, reset_context
from app.hub.session import IdentityProvider
from app.hub.toasts import Toaster
from app.models.user import Identity
from app.store.memory_store import MemoryDocumentStore


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def context(store):
    reset_context()
    ctx = init_context(store)
    yield ctx
    reset_context()


@pytest.fixture
def post_service(context):
    return PostService(context)


@pytest.fixture
def reply_service(context):
    return ReplyService(context)


@pytest.fixture
def notification_service(context):
    return NotificationService(context)


@pytest.fixture
def alice():
    return Identity(user_id="alice", display_name="Alice", avatar_url="https://img.example/alice.png",
                    email="alice@example.com")


@pytest.fixture
def bob():
    return Identity(user_id="bob", display_name="Bob", email="bob@example.com")


@pytest.fixture
def provider():
    """인증 상태가 아직 확정되지 않은(loading) IdentityProvider."""
    return IdentityProvider()


@pytest.fixture
def toaster():
    return Toaster()


# --- Flask ---
FAKE_ID_TOKENS = {
    "alice-token": {"uid": "alice", "name": "Alice", "picture": "https://img.example/alice.png",
                    "email": "alice@example.com"},
    "bob-token": {"uid": "bob", "name": "Bob", "email": "bob@example.com"},
    "carol-token": {"uid": "carol", "name": "Carol"},
}


def fake_verifier(id_token):
    if id_token not in FAKE_ID_TOKENS:
        raise ValueError("unknown token")
    return FAKE_ID_TOKENS[id_token]


@pytest.fixture
def app(store):
    from app import create_app
    flask_app = create_app('testing', store=store, auth_verifier=fake_verifier)
    yield flask_app
    reset_context()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    """사용자별 Authorization 헤더를 만드는 헬퍼. 실제 세션 교환 엔드포인트를 거칩니다."""
    def _headers(id_token="alice-token"):
        response = client.post('/api/auth/session', json={"id_token": id_token})
        assert response.status_code == 200, response.get_json()
        return {"Authorization": f"Bearer {response.get_json()['access_token']}"}
    return _headers
