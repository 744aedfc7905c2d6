# app/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from app.api.users.schemas import UserPublicResponseSchema, UserProfileResponseSchema, ProfileUpdateSchema
from app.core.security import current_identity

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('/<string:user_id>', methods=['GET'])
@jwt_required(optional=True)
def get_user_profile(user_id: str):
    """특정 사용자의 공개 프로필 정보(게시물 수 포함)를 조회합니다."""
    user_service = current_app.services['users']
    try:
        user_profile = user_service.get_public_profile(user_id)
        if not user_profile:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "User not found."}), 404
        return jsonify(UserPublicResponseSchema().dump(user_profile)), 200
    except Exception as e:
        logging.error(f"사용자 프로필 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_FETCH_FAILED", "message": "Failed to load profile."}), 500


@users_bp.route('/me/profile', methods=['PATCH'])
@jwt_required()
def update_my_profile():
    """
    현재 로그인된 사용자의 표시 이름/사용자명/프로필 사진을 갱신합니다.
    이미 작성된 게시글과 댓글의 작성자 정보는 바뀌지 않습니다.
    """
    user_service = current_app.services['users']
    identity = current_identity()
    try:
        data = ProfileUpdateSchema().load(request.get_json() or {})
        profile = user_service.update_profile(
            identity,
            display_name=data.get('display_name'),
            username=data.get('username'),
            photo_url=data.get('photo_url'),
        )
        return jsonify(UserProfileResponseSchema().dump(profile)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"프로필 업데이트 중 오류 발생 (user_id: {identity.user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to update profile."}), 500
