"""
Error definitions for the asset service.

규칙:
- 조용한 실패 금지 → AssetError 계열로 명시적 실패
- 모든 에러는 요청 경계에서 {success: false, error} 로 변환
- 재시도 없음, 프로세스 종료 없음
"""

from typing import Any


class AssetError(Exception):
    """
    에셋 처리 중 발생하는 에러의 기반 클래스.

    하위 클래스가 HTTP 상태 코드를 정한다:
    - AssetValidationError: 400
    - StaticAssetForbiddenError: 403
    - AssetNotFoundError: 404
    - AssetConflictError: 409
    - StorageError: 500

    Usage:
        raise AssetNotFoundError("ASSET_NOT_FOUND", "File not found", name=name)
    """

    status_code = 500

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        if ctx_str:
            return f"[{self.code}] {self.message} ({ctx_str})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class AssetValidationError(AssetError):
    """잘못된/누락된 파일명, 허용되지 않은 타입/크기, 잘못된 id."""

    status_code = 400


class StaticAssetForbiddenError(AssetError):
    """정적 배포 파일에 대한 변경 시도."""

    status_code = 403


class AssetNotFoundError(AssetError):
    """대상 파일 없음."""

    status_code = 404


class AssetConflictError(AssetError):
    """대상 파일명이 이미 존재."""

    status_code = 409


class StorageError(AssetError):
    """예상치 못한 파일시스템 실패 (OSError 래핑)."""

    status_code = 500


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Validation ===
    NO_FILE = "NO_FILE"
    UNSUPPORTED_MIME_TYPE = "UNSUPPORTED_MIME_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_FILENAME = "INVALID_FILENAME"
    MISSING_NEW_NAME = "MISSING_NEW_NAME"
    INVALID_ASSET_ID = "INVALID_ASSET_ID"
    INVALID_REQUEST = "INVALID_REQUEST"

    # === Lookup / Mutation ===
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    ASSET_EXISTS = "ASSET_EXISTS"
    STATIC_ASSET_IMMUTABLE = "STATIC_ASSET_IMMUTABLE"

    # === Filesystem ===
    STORAGE_ERROR = "STORAGE_ERROR"
