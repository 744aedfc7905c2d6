# app/api/users/services.py
import logging
from typing import Optional, Dict, Any

from app.api.posts.services import PostService
from app.core.context import FanHubContext
from app.core.exceptions import AuthenticationRequiredError
from app.models.user import Identity, UserProfile, user_path


class UserService:
    """
    'users' 컬렉션의 프로필 문서를 관리합니다.
    auth_client가 주어지면 (firebase_admin.auth) Firebase Auth 사용자 정보도 함께 갱신합니다.
    """
    def __init__(self, context: FanHubContext, post_service: PostService, auth_client=None):
        self.store = context.store
        self.post_service = post_service
        self.auth_client = auth_client

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        doc = self.store.get(user_path(user_id))
        if not doc.exists:
            return None
        return UserProfile.from_document(doc.to_dict())

    def ensure_profile(self, identity: Identity) -> UserProfile:
        """최초 로그인 시 프로필 문서를 생성하고, 이미 있으면 그대로 반환합니다."""
        profile = self.get_profile(identity.user_id)
        if profile:
            return profile

        profile = UserProfile(
            uid=identity.user_id,
            email=identity.email,
            display_name=identity.display_name or "",
            photo_url=identity.avatar_url,
        )
        self.store.set(user_path(identity.user_id), profile.to_document())
        logging.info(f"User profile created: {identity.user_id}")
        return profile

    def get_public_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """공개 프로필 정보 (게시물 수 포함)."""
        profile = self.get_profile(user_id)
        if not profile:
            return None
        return {
            "user_id": profile.uid,
            "display_name": profile.display_name,
            "username": profile.username,
            "photo_url": profile.photo_url,
            "post_count": self.post_service.count_posts_by_author(user_id),
        }

    def update_profile(self, identity: Optional[Identity], display_name: Optional[str] = None,
                       username: Optional[str] = None, photo_url: Optional[str] = None) -> UserProfile:
        """
        프로필을 갱신합니다. 이미 작성된 게시글/댓글의 작성자 정보는 바뀌지 않습니다.
        """
        if identity is None:
            raise AuthenticationRequiredError("You must be logged in to update your profile.")

        profile = self.ensure_profile(identity)
        updates: Dict[str, Any] = {}
        if display_name is not None:
            updates["displayName"] = display_name.strip()
        if username is not None:
            updates["username"] = username.strip()
        if photo_url is not None:
            updates["photoURL"] = photo_url
        if not updates:
            return profile

        if self.auth_client is not None:
            try:
                self.auth_client.update_user(
                    identity.user_id,
                    display_name=updates.get("displayName", profile.display_name) or None,
                    photo_url=updates.get("photoURL", profile.photo_url),
                )
            except Exception as e:
                logging.error(f"Firebase Auth 프로필 업데이트 실패 (user_id: {identity.user_id}): {e}", exc_info=True)
                raise

        self.store.update(user_path(identity.user_id), updates)
        return self.get_profile(identity.user_id)
