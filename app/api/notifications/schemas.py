# app/api/notifications/schemas.py
from marshmallow import Schema, fields

class ActorSchema(Schema):
    """알림을 발생시킨 사용자의 스냅샷."""
    user_id = fields.Str(required=True)
    display_name = fields.Str(required=True)
    avatar_url = fields.Str(allow_none=True)

class NotificationResponseSchema(Schema):
    notification_id = fields.Str(dump_only=True)
    type = fields.Function(lambda obj: obj.type.value)
    actor = fields.Nested(ActorSchema, required=True)
    post_id = fields.Str(required=True)
    post_title_snippet = fields.Str(allow_none=True)
    reply_text_snippet = fields.Str(allow_none=True)
    reply_id = fields.Str(allow_none=True)
    read = fields.Bool(required=True)
    created_at = fields.DateTime(allow_none=True)
    link = fields.Function(lambda obj: obj.deep_link())

class MarkAllReadSchema(Schema):
    """POST /api/notifications/read-all 요청 본문. ids가 없으면 최신 목록의 안 읽은 알림 전체."""
    ids = fields.List(fields.Str(), load_default=None, allow_none=True)
