# app/api/posts/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

# --- 재사용을 위한 중첩 스키마 ---
class AuthorSchema(Schema):
    """게시물/댓글 응답에 포함될 작성자 스냅샷 스키마."""
    user_id = fields.Str(required=True)
    display_name = fields.Str(required=True)
    avatar_url = fields.Str(allow_none=True)

# --- API 요청/응답 스키마 ---

class PostCreateSchema(Schema):
    """POST /api/posts 요청 본문의 유효성을 검사합니다."""
    title = fields.Str(load_default="", validate=validate.Length(max=200))
    description = fields.Str(load_default="", validate=validate.Length(max=5000))
    link = fields.Str(load_default=None, allow_none=True)
    image_url = fields.Str(load_default=None, allow_none=True)

    @validates_schema
    def validate_content(self, data, **kwargs):
        if not (data.get("title") or "").strip() and not (data.get("description") or "").strip():
            raise ValidationError("Please provide at least a title or description.", "_schema")

class LikeToggleSchema(Schema):
    """POST /api/posts/{post_id}/like 요청 본문. 클릭 직전의 로컬 상태를 보냅니다."""
    liked = fields.Bool(required=True)
    likes = fields.Int(required=True, validate=validate.Range(min=0))

class LikeStateSchema(Schema):
    liked = fields.Bool(required=True)
    likes = fields.Int(required=True)

class ReplyCreateSchema(Schema):
    """POST /api/posts/{post_id}/replies 요청 본문."""
    text = fields.Str(required=True, validate=validate.Length(max=2000))

class ReplyResponseSchema(Schema):
    reply_id = fields.Str(dump_only=True)
    post_id = fields.Str(required=True)
    text = fields.Str(required=True)
    author = fields.Nested(AuthorSchema, required=True)
    created_at = fields.DateTime(allow_none=True)

class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(dump_only=True)
    author = fields.Nested(AuthorSchema, required=True)
    title = fields.Str(required=True)
    description = fields.Str(required=True)
    link = fields.Str(allow_none=True)
    image_url = fields.Str(allow_none=True)
    likes = fields.Int(required=True)
    created_at = fields.DateTime(allow_none=True)
    is_liked = fields.Bool(dump_only=True, dump_default=False)
