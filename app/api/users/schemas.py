# app/api/users/schemas.py
from marshmallow import Schema, fields, validate

class UserPublicResponseSchema(Schema):
    """
    GET /api/users/{user_id}
    다른 사용자의 프로필 정보를 응답할 때 사용하는 스키마.
    이메일은 제외하고 공개 가능한 정보만 포함합니다.
    """
    user_id = fields.Str(required=True, dump_only=True)
    display_name = fields.Str(required=True)
    username = fields.Str(allow_none=True)
    photo_url = fields.Str(allow_none=True)
    post_count = fields.Int(required=True)

class UserProfileResponseSchema(Schema):
    """본인 프로필 응답. users/{uid} 문서 전체."""
    uid = fields.Str(required=True)
    email = fields.Str(allow_none=True)
    display_name = fields.Str()
    username = fields.Str()
    photo_url = fields.Str(allow_none=True)
    created_at = fields.DateTime(allow_none=True)

class ProfileUpdateSchema(Schema):
    """PATCH /api/users/me/profile 요청 본문. 보낸 필드만 갱신합니다."""
    display_name = fields.Str(validate=validate.Length(max=100))
    username = fields.Str(validate=validate.Length(max=50))
    photo_url = fields.Str(allow_none=True)
