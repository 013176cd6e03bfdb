"""
Asset Registry: 디렉터리 스캔 → 가상 파일 목록

규칙:
- 캐시 없음: 매 요청마다 uploads/ + 정적 디렉터리를 다시 스캔
- 정적 디렉터리는 이미지 확장자만, uploads/는 타입 필터 없음 (업로드 시 검증됨)
- 디렉터리 없음 → 빈 목록, 읽기 실패 → StorageError
- 정렬: 수정 시각 내림차순
"""

import logging
import os
import stat
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import quote

from src.core.ids import encode_asset_id
from src.domain.constants import (
    MAX_FILENAME_BYTES,
    RESERVED_FILENAMES,
    STATIC_URL_PREFIX,
    UPLOADS_URL_PREFIX,
)
from src.domain.errors import (
    AssetNotFoundError,
    AssetValidationError,
    ErrorCodes,
    StorageError,
)
from src.domain.schemas import Asset, HostingConfig

logger = logging.getLogger(__name__)

# 파일명에 올 수 없는 문자 (경로 구분자, NUL)
_FORBIDDEN_NAME_CHARS = frozenset("/\\\x00")


def ensure_bare_filename(name: str) -> str:
    """
    디렉터리 성분이 없는 순수 파일명인지 검증.

    Args:
        name: 검증할 파일명

    Returns:
        그대로의 파일명

    Raises:
        AssetValidationError: INVALID_FILENAME
    """
    if name in RESERVED_FILENAMES:
        raise AssetValidationError(
            ErrorCodes.INVALID_FILENAME,
            "Filename cannot be empty or a reserved path component",
            name=name,
        )

    found = set(name) & _FORBIDDEN_NAME_CHARS
    if found:
        raise AssetValidationError(
            ErrorCodes.INVALID_FILENAME,
            "Filename must not contain path separators",
            name=name,
        )

    if len(name.encode("utf-8", "surrogatepass")) > MAX_FILENAME_BYTES:
        raise AssetValidationError(
            ErrorCodes.INVALID_FILENAME,
            f"Filename is too long (max {MAX_FILENAME_BYTES} bytes)",
            length=len(name),
        )

    return name


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, UTC).isoformat()


class AssetRegistry:
    """
    파일시스템 기반 에셋 조회.

    구조:
    <upload_dir>/<name>   → isUploaded=True,  url=/uploads/<name>
    <static_dir>/<name>   → isUploaded=False, url=/<name>
    """

    def __init__(self, config: HostingConfig):
        """
        Args:
            config: 디렉터리/정책 설정
        """
        self.config = config
        self.upload_dir = config.upload_dir
        self.static_dir = config.static_dir

    # =========================================================================
    # Read
    # =========================================================================

    def list_assets(self) -> list[Asset]:
        """
        전체 에셋 목록.

        Returns:
            Asset 목록 (수정 시각 내림차순)

        Raises:
            StorageError: 디렉터리 또는 파일 stat 실패
        """
        assets = self._scan(self.upload_dir, is_uploaded=True)
        assets.extend(self._scan(self.static_dir, is_uploaded=False))

        assets.sort(key=lambda a: a.mtime, reverse=True)
        return assets

    def get_uploaded(self, name: str) -> Asset:
        """
        uploads/ 파일 하나의 최신 레코드.

        Args:
            name: 파일명

        Returns:
            Asset

        Raises:
            AssetValidationError: INVALID_FILENAME
            AssetNotFoundError: ASSET_NOT_FOUND
            StorageError: stat 실패
        """
        path = self.resolve_upload_path(name)

        try:
            st = path.stat()
        except FileNotFoundError:
            st = None
        except OSError as e:
            logger.error("stat failed for %s: %s", path, e)
            raise StorageError(
                ErrorCodes.STORAGE_ERROR,
                "Failed to read file metadata",
                name=name,
            ) from e

        if st is None or not stat.S_ISREG(st.st_mode):
            raise AssetNotFoundError(
                ErrorCodes.ASSET_NOT_FOUND,
                f"File '{name}' not found",
                name=name,
            )

        return self._to_asset(name, st, is_uploaded=True)

    def resolve_upload_path(self, name: str) -> Path:
        """uploads/ 내부 경로 반환 (파일명 검증 포함)."""
        return self.upload_dir / ensure_bare_filename(name)

    def build_asset(self, path: Path, is_uploaded: bool) -> Asset:
        """
        파일 하나를 Asset 레코드로 변환.

        Args:
            path: 파일 경로
            is_uploaded: uploads/ 소속 여부

        Returns:
            Asset
        """
        return self._to_asset(path.name, path.stat(), is_uploaded)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _scan(self, directory: Path, is_uploaded: bool) -> list[Asset]:
        """디렉터리 하나 스캔 (없으면 빈 목록)."""
        try:
            if not directory.exists():
                return []
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.error("Failed to read directory %s: %s", directory, e)
            raise StorageError(
                ErrorCodes.STORAGE_ERROR,
                "Failed to read asset directory",
                directory=str(directory),
            ) from e

        extensions = self.config.static_extensions
        assets: list[Asset] = []

        for entry in entries:
            if not is_uploaded and entry.suffix.lower() not in extensions:
                continue

            try:
                st = entry.stat()
            except FileNotFoundError:
                # 스캔 도중 삭제됨
                continue
            except OSError as e:
                logger.error("stat failed for %s: %s", entry, e)
                raise StorageError(
                    ErrorCodes.STORAGE_ERROR,
                    "Failed to read file metadata",
                    name=entry.name,
                ) from e

            if not stat.S_ISREG(st.st_mode):
                continue

            assets.append(self._to_asset(entry.name, st, is_uploaded))

        return assets

    def _to_asset(self, name: str, st: os.stat_result, is_uploaded: bool) -> Asset:
        if is_uploaded:
            url = f"{UPLOADS_URL_PREFIX}/{quote(name, safe='')}"
        else:
            url = f"{STATIC_URL_PREFIX}/{quote(name, safe='')}"

        # birth time은 일부 플랫폼만 제공
        created = getattr(st, "st_birthtime", None) or st.st_ctime

        return Asset(
            id=encode_asset_id(name, is_static=not is_uploaded),
            name=name,
            url=url,
            size=st.st_size,
            created_at=_isoformat(created),
            modified_at=_isoformat(st.st_mtime),
            is_uploaded=is_uploaded,
            mtime=st.st_mtime,
        )
