# app/models/post.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any

from app.utils.datetime_utils import DateTimeUtils

TITLE_SNIPPET_LENGTH = 50
REPLY_SNIPPET_LENGTH = 75
DEFAULT_TITLE_SNIPPET = "your post"


@dataclass(frozen=True)
class AuthorSnapshot:
    """
    작성 시점에 문서에 값으로 복사되는 작성자 정보.
    이후 프로필이 바뀌어도 기존 문서는 갱신하지 않습니다 (의도적으로 오래된 값).
    """
    user_id: str
    display_name: str
    avatar_url: Optional[str] = None

    def to_fields(self, prefix: str = 'author') -> Dict[str, Any]:
        return {
            f"{prefix}Id": self.user_id,
            f"{prefix}Name": self.display_name,
            f"{prefix}Avatar": self.avatar_url,
        }

    @classmethod
    def from_fields(cls, data: Dict[str, Any], prefix: str = 'author') -> "AuthorSnapshot":
        return cls(
            user_id=data.get(f"{prefix}Id", ""),
            display_name=data.get(f"{prefix}Name") or "Anonymous",
            avatar_url=data.get(f"{prefix}Avatar"),
        )


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    likes는 posts/{id}/likes 하위 컬렉션의 문서 수와 항상 같아야 합니다.
    """
    post_id: str
    author: AuthorSnapshot
    description: str = ""
    title: str = ""
    link: Optional[str] = None
    image_url: Optional[str] = None
    likes: int = 0
    created_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        doc = {
            "title": self.title,
            "description": self.description,
            "link": self.link,
            "imageUrl": self.image_url,
            "likes": self.likes,
            "createdAt": self.created_at,
        }
        doc.update(self.author.to_fields())
        return doc

    @classmethod
    def from_document(cls, post_id: str, data: Dict[str, Any]) -> "Post":
        return cls(
            post_id=post_id,
            author=AuthorSnapshot.from_fields(data),
            description=data.get("description") or "",
            title=data.get("title") or "",
            link=data.get("link"),
            image_url=data.get("imageUrl"),
            likes=max(0, int(data.get("likes") or 0)),
            created_at=data.get("createdAt"),
        )

    def title_snippet(self) -> str:
        """알림에 들어갈 게시물 요약. 제목 -> 본문 -> 'your post' 순서로 사용합니다."""
        return (
            self.title[:TITLE_SNIPPET_LENGTH]
            or self.description[:TITLE_SNIPPET_LENGTH]
            or DEFAULT_TITLE_SNIPPET
        )

    def matches(self, term: str) -> bool:
        """제목/본문/작성자 이름에 대한 대소문자 무시 부분 문자열 검색."""
        needle = (term or "").lower()
        if not needle:
            return True
        haystacks = (self.title, self.description, self.author.display_name)
        return any(needle in (text or "").lower() for text in haystacks)


@dataclass
class Reply:
    """'posts/{post_id}/replies' 하위 컬렉션 문서."""
    reply_id: str
    post_id: str
    text: str
    author: AuthorSnapshot
    created_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        doc = {"text": self.text, "createdAt": self.created_at}
        doc.update(self.author.to_fields())
        return doc

    @classmethod
    def from_document(cls, post_id: str, reply_id: str, data: Dict[str, Any]) -> "Reply":
        return cls(
            reply_id=reply_id,
            post_id=post_id,
            text=data.get("text") or "",
            author=AuthorSnapshot.from_fields(data),
            created_at=data.get("createdAt"),
        )

    def text_snippet(self) -> str:
        return self.text[:REPLY_SNIPPET_LENGTH]


@dataclass
class LikeMarker:
    """'posts/{post_id}/likes/{user_id}' 문서. 존재 여부가 곧 좋아요 상태입니다."""
    user_id: str
    liked_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_document(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "likedAt": self.liked_at}


def post_path(post_id: str) -> str:
    return f"posts/{post_id}"

def like_path(post_id: str, user_id: str) -> str:
    return f"posts/{post_id}/likes/{user_id}"

def replies_path(post_id: str) -> str:
    return f"posts/{post_id}/replies"
