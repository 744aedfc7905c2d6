# app/services/storage_service.py
import logging
from typing import BinaryIO, Dict, Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from flask import Flask

from app.core.exceptions import UploadError

# 업로드 목적(tag) -> Cloudinary 폴더
UPLOAD_FOLDERS: Dict[str, str] = {
    "avatar": "avatars",
    "post_image": "posts",
}


class StorageService:
    """
    이미지 업로드를 외부 미디어 호스트(Cloudinary)로 프록시하는 서비스 클래스입니다.
    업로드 결과로 공개적으로 접근 가능한 고정 URL(secure_url)을 반환합니다.
    """

    def __init__(self):
        """
        실제 계정 정보는 init_app 메서드를 통해 주입됩니다.
        """
        self.configured = False

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Cloudinary SDK를 설정합니다.
        설정이 비어 있으면 업로드 시점에 UploadError가 발생합니다.
        """
        cloud_name = app.config.get('CLOUDINARY_CLOUD_NAME')
        api_key = app.config.get('CLOUDINARY_API_KEY')
        api_secret = app.config.get('CLOUDINARY_API_SECRET')
        self.configured = all([cloud_name, api_key, api_secret])
        if not self.configured:
            logging.warning("StorageService: Cloudinary 설정이 없어 업로드가 비활성화됩니다.")
            return

        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)
        logging.info("StorageService: Cloudinary 업로드 서비스가 초기화되었습니다.")

    def upload(self, stream: BinaryIO, filename: str, upload_type: str, content_type: Optional[str] = None) -> str:
        """
        파일을 업로드하고 secure_url을 반환합니다.

        :param stream: 업로드할 파일 스트림
        :param filename: 원본 파일명 (로그용)
        :param upload_type: 업로드 목적 ("avatar", "post_image")
        :param content_type: 파일의 MIME 타입 (로그용)
        :return: 공개 https URL
        """
        folder = UPLOAD_FOLDERS.get(upload_type)
        if not folder:
            raise ValueError(f"'{upload_type}' is not a valid upload type.")
        if not self.configured:
            raise UploadError("Media host is not configured.")

        try:
            result = cloudinary.uploader.upload(stream, folder=folder, resource_type="image")
        except cloudinary.exceptions.Error as e:
            logging.error(f"Cloudinary 업로드 실패 ({folder}, {filename}, {content_type}): {e}")
            raise UploadError(str(e)) from e

        secure_url = (result or {}).get("secure_url")
        if not secure_url:
            raise UploadError("Cloudinary upload failed to return a secure URL.")
        logging.info(f"Cloudinary 업로드 완료 ({folder}): {secure_url}")
        return secure_url
