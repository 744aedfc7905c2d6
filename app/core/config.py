# app/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명 키. 토큰의 위변조를 방지합니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 문서 저장소 종류: 'firestore' 또는 'memory'
    FANHUB_STORE = os.getenv('FANHUB_STORE', 'firestore')

    # 피드/알림 목록에서 한 번에 가져오는 최대 개수
    FEED_LIMIT = int(os.getenv('FEED_LIMIT', 20))
    NOTIFICATION_LIMIT = int(os.getenv('NOTIFICATION_LIMIT', 20))

    # 이미지 업로드를 위임하는 외부 미디어 호스트(Cloudinary) 계정 정보
    CLOUDINARY_CLOUD_NAME = os.getenv('CLOUDINARY_CLOUD_NAME')
    CLOUDINARY_API_KEY = os.getenv('CLOUDINARY_API_KEY')
    CLOUDINARY_API_SECRET = os.getenv('CLOUDINARY_API_SECRET')

    # 업로드 요청 본문 최대 크기 (10MB)
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    # 개발용 Firebase 프로젝트의 서비스 계정 키 파일 경로
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')

class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다. Firebase 대신 메모리 저장소를 사용합니다."""
    TESTING = True
    DEBUG = False
    FANHUB_STORE = 'memory'
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'fanhub-test-secret-key-with-32-bytes!')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    CLOUDINARY_CLOUD_NAME = 'test-cloud'
    CLOUDINARY_API_KEY = 'test-key'
    CLOUDINARY_API_SECRET = 'test-secret'

# FLASK_ENV 값에 따라 create_app에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    production=ProductionConfig,
    testing=TestingConfig
)
