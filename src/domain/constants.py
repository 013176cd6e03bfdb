"""
Domain Constants: 서비스 전역 상수.

디렉터리 기본값, 업로드 정책, id 마커 등 시스템 전반에서 사용되는 값들.
실제 경로는 HostingConfig로 주입되며 여기 값은 기본값일 뿐이다.
"""

import os

# =============================================================================
# Directory Defaults (디렉터리 기본값)
# =============================================================================
# <project_root>/
# ├── uploads/   # 사용자 업로드 (변경 가능)
# └── dist/      # 배포 시 포함된 정적 파일 (읽기 전용)

DEFAULT_UPLOAD_DIRNAME = "uploads"
DEFAULT_STATIC_DIRNAME = "dist"
SPA_INDEX_FILENAME = "index.html"

# 환경 변수 오버라이드
UPLOAD_DIR_ENV = "UPLOAD_DIR"
STATIC_DIR_ENV = "STATIC_DIR"
PORT_ENV = "PORT"

# =============================================================================
# URL Prefixes
# =============================================================================

UPLOADS_URL_PREFIX = "/uploads"
STATIC_URL_PREFIX = ""

# =============================================================================
# Upload Policy (업로드 정책)
# =============================================================================

UPLOAD_MAX_SIZE_MB = 10

ALLOWED_IMAGE_MIME_TYPES = (
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
    "image/svg+xml",
)

# 정적 디렉터리에서 목록에 포함할 확장자 (대소문자 무시)
STATIC_IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg")

# 파일명으로 쓸 수 없는 값
RESERVED_FILENAMES = ("", ".", "..")

# 파일명 최대 길이 (UTF-8 바이트, 대부분 파일시스템의 NAME_MAX)
MAX_FILENAME_BYTES = 255

# =============================================================================
# Opaque ID
# =============================================================================
# 정적 파일 id는 인코딩 전에 마커를 붙인다: id = b64("public_" + name)

STATIC_ID_PREFIX = "public_"

# =============================================================================
# MIME Types
# =============================================================================

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".html": "text/html",
}


def get_mime_type(filename: str) -> str:
    """
    파일명에서 MIME 타입 추출.

    Args:
        filename: 파일명 (확장자 포함)

    Returns:
        MIME 타입 문자열 (알 수 없으면 octet-stream)
    """
    ext = os.path.splitext(filename)[1].lower()
    return MIME_TYPES.get(ext, "application/octet-stream")
