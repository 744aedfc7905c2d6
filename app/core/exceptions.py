# app/core/exceptions.py
"""Fan Hub 도메인 예외 정의."""
from typing import Optional


class FanHubError(Exception):
    """모든 도메인 예외의 기반 클래스. error_code는 API 응답에 그대로 사용됩니다."""
    error_code = "FANHUB_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationRequiredError(FanHubError, PermissionError):
    """로그인하지 않은 상태에서 인증이 필요한 작업을 시도한 경우. 네트워크 호출 전에 차단됩니다."""
    error_code = "AUTHENTICATION_REQUIRED"


class NotAuthorizedError(FanHubError, PermissionError):
    """작성자가 아닌 사용자가 삭제 등을 시도한 경우."""
    error_code = "FORBIDDEN"


class LikeConflictError(FanHubError):
    """좋아요 마커의 실제 상태가 낙관적 전제와 다른 경우 (빠른 연속 토글 등)."""
    error_code = "LIKE_STATE_CONFLICT"


class ResourceNotFoundError(FanHubError, ValueError):
    """게시물/댓글 등이 존재하지 않는 경우."""
    error_code = "RESOURCE_NOT_FOUND"


class UploadError(FanHubError):
    """미디어 업로드 게이트웨이 실패."""
    error_code = "UPLOAD_FAILED"


def describe_error(err: BaseException, fallback: str) -> str:
    """사용자에게 보여줄 수 있는 메시지를 예외에서 추출합니다. 추출할 수 없으면 fallback."""
    message: Optional[str] = getattr(err, 'message', None)
    if not message and err.args and isinstance(err.args[0], str):
        message = err.args[0]
    message = (message or '').strip()
    return message or fallback
