#app/api/auth/schemas.py
from marshmallow import Schema, fields

class SessionRequestSchema(Schema):
    """Firebase ID 토큰을 앱 JWT로 교환하는 요청의 유효성을 검사하는 스키마"""
    id_token = fields.Str(
        required=True,
        metadata={"description": "Firebase Authentication이 발급한 ID 토큰"}
    )

class IdentityResponseSchema(Schema):
    user_id = fields.Str(required=True)
    display_name = fields.Str(allow_none=True)
    avatar_url = fields.Str(allow_none=True)
    email = fields.Str(allow_none=True)
