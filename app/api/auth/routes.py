# app/api/auth/routes.py

import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from app.api.auth.schemas import SessionRequestSchema, IdentityResponseSchema
from app.core.security import issue_tokens, refresh_access_token, current_identity

auth_bp = Blueprint('auth_bp', __name__)

@auth_bp.route('/session', methods=['POST'])
def create_session():
    """
    Firebase ID 토큰을 검증하고 앱 전용 Access/Refresh 토큰을 발급합니다.
    최초 로그인이면 users/{uid} 프로필 문서를 만듭니다.
    """
    try:
        data = SessionRequestSchema().load(request.get_json() or {})
        identity = current_app.services['auth'].verify(data['id_token'])
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_ID_TOKEN", "message": str(e)}), 401

    try:
        current_app.services['users'].ensure_profile(identity)
        tokens = issue_tokens(identity)
        return jsonify(dict(tokens, user=IdentityResponseSchema().dump(identity))), 200
    except Exception as e:
        logging.error(f"세션 생성 중 예외 발생 (user_id: {identity.user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to create session."}), 500


# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다."""
    return jsonify(access_token=refresh_access_token()), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    """현재 토큰의 사용자 정보."""
    return jsonify(IdentityResponseSchema().dump(current_identity())), 200
