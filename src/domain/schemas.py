"""
Data schemas for the asset service.

규칙:
- Asset은 저장되지 않는다: 목록 요청마다 파일시스템에서 다시 계산
- JSON 키는 camelCase (기존 클라이언트 호환)
- 디렉터리 경로는 전역 상수가 아니라 HostingConfig로 주입
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.domain.constants import (
    ALLOWED_IMAGE_MIME_TYPES,
    DEFAULT_STATIC_DIRNAME,
    DEFAULT_UPLOAD_DIRNAME,
    STATIC_DIR_ENV,
    STATIC_IMAGE_EXTENSIONS,
    UPLOAD_DIR_ENV,
    UPLOAD_MAX_SIZE_MB,
)

# =============================================================================
# Asset
# =============================================================================

@dataclass
class Asset:
    """
    호스팅 중인 이미지 파일 하나.

    id는 파일명을 가역 인코딩한 값이라 rename 시 함께 바뀐다.
    """
    id: str
    name: str
    url: str
    size: int
    created_at: str  # ISO-8601
    modified_at: str  # ISO-8601
    is_uploaded: bool  # True: uploads/, False: 정적 디렉터리
    mtime: float = field(default=0.0, repr=False, compare=False)  # 정렬용

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용."""
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "size": self.size,
            "createdAt": self.created_at,
            "modifiedAt": self.modified_at,
            "isUploaded": self.is_uploaded,
        }


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class HostingConfig:
    """
    레지스트리/뮤테이터에 주입되는 설정.

    default.yaml 구조:
        storage:
          upload_dir: uploads
          static_dir: dist
        upload:
          max_size_mb: 10
          allowed_mime_types: [image/png, ...]
    """
    upload_dir: Path
    static_dir: Path
    max_upload_bytes: int = UPLOAD_MAX_SIZE_MB * 1024 * 1024
    allowed_mime_types: tuple[str, ...] = ALLOWED_IMAGE_MIME_TYPES
    static_extensions: tuple[str, ...] = STATIC_IMAGE_EXTENSIONS

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        base_dir: Path,
        env: Mapping[str, str] | None = None,
    ) -> "HostingConfig":
        """
        설정 dict(+환경 변수)에서 HostingConfig 생성.

        우선순위: 환경 변수 > 설정 파일 > 기본값.
        상대 경로는 base_dir 기준으로 해석한다.

        Args:
            data: default.yaml 내용 (없으면 빈 dict)
            base_dir: 상대 경로 기준 디렉터리 (프로젝트 루트)
            env: 환경 변수 (기본: 없음)

        Returns:
            HostingConfig
        """
        env = env or {}
        storage = data.get("storage") or {}
        upload = data.get("upload") or {}

        upload_dir = env.get(UPLOAD_DIR_ENV) or storage.get("upload_dir") or DEFAULT_UPLOAD_DIRNAME
        static_dir = env.get(STATIC_DIR_ENV) or storage.get("static_dir") or DEFAULT_STATIC_DIRNAME

        max_size_mb = upload.get("max_size_mb", UPLOAD_MAX_SIZE_MB)
        mime_types = upload.get("allowed_mime_types") or ALLOWED_IMAGE_MIME_TYPES
        extensions = upload.get("static_extensions") or STATIC_IMAGE_EXTENSIONS

        return cls(
            upload_dir=_resolve_dir(upload_dir, base_dir),
            static_dir=_resolve_dir(static_dir, base_dir),
            max_upload_bytes=int(float(max_size_mb) * 1024 * 1024),
            allowed_mime_types=tuple(m.lower() for m in mime_types),
            static_extensions=tuple(e.lower() for e in extensions),
        )


def _resolve_dir(value: str | Path, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path
