# app/api/auth/services.py
import logging
from typing import Callable, Dict, Any, Optional

from firebase_admin import auth as firebase_auth

from app.models.user import Identity


class AuthService:
    """
    Firebase Authentication이 발급한 ID 토큰을 검증해 Identity로 변환합니다.
    verifier는 테스트에서 교체할 수 있도록 주입받습니다.
    """
    def __init__(self, verifier: Optional[Callable[[str], Dict[str, Any]]] = None):
        self.verifier = verifier or firebase_auth.verify_id_token

    def verify(self, id_token: str) -> Identity:
        """
        ID 토큰을 검증합니다. 유효하지 않으면 ValueError를 발생시킵니다.
        """
        try:
            claims = self.verifier(id_token)
        except Exception as e:
            logging.warning(f"Firebase ID 토큰 검증 실패: {e}")
            raise ValueError("Invalid or expired ID token.") from e

        uid = claims.get('uid') or claims.get('sub')
        if not uid:
            raise ValueError("ID token does not contain a user id.")

        return Identity(
            user_id=uid,
            display_name=claims.get('name'),
            avatar_url=claims.get('picture'),
            email=claims.get('email'),
        )
