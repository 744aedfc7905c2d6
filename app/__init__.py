# app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials, auth as firebase_auth

# - 설정 및 컨텍스트
from app.core.config import config_by_name
from app.core.context import init_context, reset_context
from app.core.exceptions import FanHubError

# - API 블루프린트
from app.api.auth.routes import auth_bp
from app.api.uploads.routes import uploads_bp
from app.api.users.routes import users_bp
from app.api.posts.routes import posts_bp
from app.api.notifications.routes import notifications_bp

# - 서비스 모듈
from app.services import storage_service as storage_service_module
from app.api.auth import services as auth_service_module
from app.api.users import services as user_service_module
from app.api.posts import services as post_service_module
from app.api.replies import services as reply_service_module
from app.api.notifications import services as notification_service_module

# - 저장소
from app.store.memory_store import MemoryDocumentStore
from app.store.firestore_store import FirestoreDocumentStore


def _create_store(app: Flask):
    """FANHUB_STORE 설정에 따라 문서 저장소를 만듭니다."""
    if app.config['FANHUB_STORE'] == 'memory':
        return MemoryDocumentStore()

    if not firebase_admin._apps:
        cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred)

    return FirestoreDocumentStore()


def create_app(config_name=None, store=None, auth_verifier=None):
    """
    Flask 애플리케이션 팩토리 함수.
    store/auth_verifier는 테스트에서 외부 서비스를 대체할 때 주입합니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    store = store or _create_store(app)
    firestore_mode = app.config['FANHUB_STORE'] != 'memory'

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용/핵심 서비스 먼저 생성
    try:
        storage_instance = storage_service_module.StorageService()
        storage_instance.init_app(app)
        app.services['storage'] = storage_instance
        logging.info("Storage service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize storage service: {e}")
        raise

    # 앱 팩토리가 다시 호출되는 경우(테스트 등) 이전 컨텍스트를 교체합니다.
    reset_context()
    context = init_context(
        store,
        uploads=storage_instance,
        feed_limit=app.config['FEED_LIMIT'],
        notification_limit=app.config['NOTIFICATION_LIMIT'],
    )
    app.services['context'] = context

    # 5-2. 컨텍스트를 주입받는 도메인 서비스 생성
    app.services['posts'] = post_service_module.PostService(context)
    app.services['replies'] = reply_service_module.ReplyService(context)
    app.services['notifications'] = notification_service_module.NotificationService(context)
    app.services['users'] = user_service_module.UserService(
        context,
        post_service=app.services['posts'],
        auth_client=firebase_auth if firestore_mode else None,
    )
    app.services['auth'] = auth_service_module.AuthService(verifier=auth_verifier)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(FanHubError)
    def handle_domain_error(err):
        status = {
            "AUTHENTICATION_REQUIRED": 401,
            "FORBIDDEN": 403,
            "RESOURCE_NOT_FOUND": 404,
            "LIKE_STATE_CONFLICT": 409,
        }.get(err.error_code, 500)
        return jsonify({"error_code": err.error_code, "message": err.message}), status

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리 (404/405 등 HTTP 오류는 그대로)
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "An unexpected server error occurred."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
