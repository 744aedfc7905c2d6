# app/api/uploads/routes.py

import logging
from flask import request, jsonify, Blueprint, current_app

from app.core.exceptions import UploadError

# 이 블루프린트에 속한 모든 API는 '/api/uploads' 접두사 URL을 갖습니다.
# 두 엔드포인트는 저장 폴더 태그만 다릅니다.
uploads_bp = Blueprint('uploads', __name__)


def _handle_upload(upload_type: str):
    """multipart 'file' 필드 하나를 미디어 호스트로 전달하고 secureUrl을 반환합니다."""
    file = request.files.get('file')
    if file is None or not file.filename:
        return jsonify({"error": "No file provided."}), 400

    storage_service = current_app.services['storage']
    try:
        secure_url = storage_service.upload(file.stream, file.filename, upload_type, file.mimetype)
        return jsonify({"secureUrl": secure_url}), 200
    except UploadError as e:
        return jsonify({"error": f"Upload failed: {e.message}"}), 500
    except Exception as e:
        logging.error(f"업로드 처리 중 서버 오류 발생 ({upload_type}): {e}", exc_info=True)
        return jsonify({"error": f"Upload failed: {e}"}), 500


@uploads_bp.route('/avatar', methods=['POST'])
def upload_avatar():
    return _handle_upload("avatar")


@uploads_bp.route('/post-image', methods=['POST'])
def upload_post_image():
    return _handle_upload("post_image")
