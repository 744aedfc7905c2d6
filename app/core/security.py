# app/core/security.py
from typing import Optional, Dict

from flask_jwt_extended import create_access_token, create_refresh_token, get_jwt, get_jwt_identity

from app.models.user import Identity


def _identity_claims(identity: Identity) -> Dict[str, Optional[str]]:
    return {"name": identity.display_name, "avatar": identity.avatar_url, "email": identity.email}


def issue_tokens(identity: Identity) -> Dict[str, str]:
    """Identity로 Access/Refresh 토큰을 발급합니다. 표시 이름/아바타는 추가 클레임으로 담습니다."""
    claims = _identity_claims(identity)
    return {
        "access_token": create_access_token(identity=identity.user_id, additional_claims=claims),
        "refresh_token": create_refresh_token(identity=identity.user_id, additional_claims=claims),
    }


def refresh_access_token() -> str:
    """@jwt_required(refresh=True) 안에서 호출합니다."""
    identity = current_identity()
    return create_access_token(identity=identity.user_id, additional_claims=_identity_claims(identity))


def current_identity() -> Optional[Identity]:
    """
    현재 요청의 JWT에서 Identity를 만듭니다.
    @jwt_required(optional=True)로 보호된 라우트에서 토큰이 없으면 None.
    """
    user_id = get_jwt_identity()
    if not user_id:
        return None
    claims = get_jwt()
    return Identity(
        user_id=user_id,
        display_name=claims.get("name"),
        avatar_url=claims.get("avatar"),
        email=claims.get("email"),
    )
