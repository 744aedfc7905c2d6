# app/api/notifications/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.notifications.schemas import NotificationResponseSchema, MarkAllReadSchema
from app.api.notifications.services import count_unread
from app.core.exceptions import ResourceNotFoundError

notifications_bp = Blueprint('notifications_bp', __name__)

@notifications_bp.route('', methods=['GET'])
@jwt_required()
def get_notifications():
    """현재 사용자의 최신 알림 목록과 읽지 않은 알림 수."""
    user_id = get_jwt_identity()
    limit = request.args.get('limit', None, type=int)
    try:
        items = current_app.services['notifications'].list_notifications(user_id, limit)
        return jsonify({
            "notifications": NotificationResponseSchema(many=True).dump(items),
            "unread_count": count_unread(items),
        }), 200
    except Exception as e:
        logging.error(f"알림 목록 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to load notifications."}), 500

@notifications_bp.route('/<string:notification_id>/read', methods=['POST'])
@jwt_required()
def mark_read(notification_id):
    user_id = get_jwt_identity()
    try:
        current_app.services['notifications'].mark_read(user_id, notification_id)
        return jsonify({"message": "Notification marked as read."}), 200
    except ResourceNotFoundError as e:
        return jsonify({"error_code": e.error_code, "message": e.message}), 404
    except Exception as e:
        logging.error(f"알림 읽음 처리 중 오류 발생 ({notification_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to update notification."}), 500

@notifications_bp.route('/read-all', methods=['POST'])
@jwt_required()
def mark_all_read():
    user_id = get_jwt_identity()
    try:
        data = MarkAllReadSchema().load(request.get_json(silent=True) or {})
        updated = current_app.services['notifications'].mark_all_read(user_id, data.get('ids'))
        return jsonify({"updated": updated}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"알림 일괄 읽음 처리 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to mark notifications as read."}), 500
