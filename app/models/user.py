# app/models/user.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any

from app.models.post import AuthorSnapshot
from app.utils.datetime_utils import DateTimeUtils


@dataclass(frozen=True)
class Identity:
    """
    인증된 현재 사용자. Firebase uid와 표시 이름/아바타를 가집니다.
    표시 이름이 없으면 이메일, 그것도 없으면 'Anonymous'를 사용합니다.
    """
    user_id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None

    @property
    def name(self) -> str:
        return self.display_name or self.email or "Anonymous"

    def snapshot(self) -> AuthorSnapshot:
        return AuthorSnapshot(user_id=self.user_id, display_name=self.name, avatar_url=self.avatar_url)


@dataclass
class UserProfile:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    uid: str
    email: Optional[str] = None
    display_name: str = ""
    username: str = ""
    photo_url: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_document(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "username": self.username,
            "photoURL": self.photo_url,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "UserProfile":
        return cls(
            uid=data.get("uid", ""),
            email=data.get("email"),
            display_name=data.get("displayName") or "",
            username=data.get("username") or "",
            photo_url=data.get("photoURL"),
            created_at=data.get("createdAt") or DateTimeUtils.now(),
        )


def user_path(user_id: str) -> str:
    return f"users/{user_id}"
