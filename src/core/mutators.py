"""
Asset Mutators: upload / rename / delete

규칙:
- 정적 파일(마커 "public_")은 변경 금지 → StaticAssetForbiddenError
- 업로드 검증(MIME, 크기, 파일명)은 쓰기 전에 수행 → 거절 시 파일 없음
- 파일명 충돌: {stem}_{밀리초 타임스탬프}{ext} (단조 증가)
- rename 대상이 이미 있으면 ConflictError, 두 파일 모두 그대로
- 락 없음: 각 호출은 현재 파일시스템 상태에 대해 독립적으로 동작
"""

import logging
import time
from pathlib import Path

from src.core.ids import decode_asset_id, is_static_name
from src.core.registry import AssetRegistry, ensure_bare_filename
from src.domain.errors import (
    AssetConflictError,
    AssetNotFoundError,
    AssetValidationError,
    ErrorCodes,
    StaticAssetForbiddenError,
    StorageError,
)
from src.domain.schemas import Asset, HostingConfig

logger = logging.getLogger(__name__)


def disambiguated_name(name: str, timestamp_ms: int) -> str:
    """
    충돌 회피용 파일명.

    예: photo.png, 1700000000000 → photo_1700000000000.png
    """
    path = Path(name)
    return f"{path.stem}_{timestamp_ms}{path.suffix}"


class AssetMutator:
    """
    uploads/ 파일 변경 서비스.

    조회는 AssetRegistry에 위임하고, 변경 후에는 항상
    파일시스템에서 새로 계산한 Asset을 반환한다.
    """

    def __init__(self, config: HostingConfig, registry: AssetRegistry | None = None):
        """
        Args:
            config: 디렉터리/정책 설정
            registry: 공유할 AssetRegistry (없으면 생성)
        """
        self.config = config
        self.registry = registry or AssetRegistry(config)
        self.upload_dir = config.upload_dir

    # =========================================================================
    # Upload
    # =========================================================================

    def upload(self, file_bytes: bytes, declared_name: str, mime_type: str) -> Asset:
        """
        업로드된 이미지를 uploads/에 저장.

        Args:
            file_bytes: 파일 내용
            declared_name: 클라이언트가 보낸 파일명
            mime_type: 클라이언트가 보낸 MIME 타입

        Returns:
            저장된 파일의 Asset

        Raises:
            AssetValidationError: UNSUPPORTED_MIME_TYPE, FILE_TOO_LARGE, INVALID_FILENAME
            StorageError: 쓰기 실패
        """
        normalized_mime = (mime_type or "").split(";")[0].strip().lower()
        if normalized_mime not in self.config.allowed_mime_types:
            raise AssetValidationError(
                ErrorCodes.UNSUPPORTED_MIME_TYPE,
                "Only image files are supported (PNG, JPG, GIF, WebP, SVG)",
                mime_type=mime_type,
            )

        if len(file_bytes) > self.config.max_upload_bytes:
            limit_mb = self.config.max_upload_bytes / (1024 * 1024)
            raise AssetValidationError(
                ErrorCodes.FILE_TOO_LARGE,
                f"File size exceeds the limit (max {limit_mb:g}MB)",
                size=len(file_bytes),
                limit=self.config.max_upload_bytes,
            )

        # 클라이언트 경로 성분 제거 (C:\\photos\\a.png, ../a.png 등)
        name = (declared_name or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
        ensure_bare_filename(name)

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            target = self._write_new(name, file_bytes)
            asset = self.registry.build_asset(target, is_uploaded=True)
        except OSError as e:
            logger.exception("Failed to store upload %s", name)
            raise StorageError(
                ErrorCodes.STORAGE_ERROR,
                "Failed to store uploaded file",
                name=name,
            ) from e

        logger.info("Uploaded %s (%d bytes)", asset.name, asset.size)
        return asset

    def _write_new(self, name: str, file_bytes: bytes) -> Path:
        """
        기존 파일을 덮어쓰지 않고 새 파일 생성.

        'xb' 모드라 동시 업로드가 같은 이름을 잡아도 덮어쓰지 않는다.
        """
        target = self.upload_dir / name
        timestamp_ms = time.time_ns() // 1_000_000

        while True:
            try:
                f = open(target, "xb")
            except FileExistsError:
                target = self.upload_dir / disambiguated_name(name, timestamp_ms)
                timestamp_ms += 1
                continue

            try:
                with f:
                    f.write(file_bytes)
            except BaseException:
                # 쓰다 만 파일은 남기지 않는다
                target.unlink(missing_ok=True)
                raise
            return target

    # =========================================================================
    # Rename
    # =========================================================================

    def rename(self, asset_id: str, new_name: str | None) -> Asset:
        """
        uploads/ 파일 이름 변경.

        Args:
            asset_id: 대상 asset id
            new_name: 새 파일명

        Returns:
            이름이 바뀐 Asset (새 id)

        Raises:
            AssetValidationError: MISSING_NEW_NAME, INVALID_FILENAME, INVALID_ASSET_ID
            StaticAssetForbiddenError: STATIC_ASSET_IMMUTABLE
            AssetNotFoundError: ASSET_NOT_FOUND
            AssetConflictError: ASSET_EXISTS
            StorageError: 이동 실패
        """
        if new_name is None or not new_name.strip():
            raise AssetValidationError(
                ErrorCodes.MISSING_NEW_NAME,
                "New filename is required",
            )
        new_name = new_name.strip()

        old_name = self._decode_mutable(asset_id, action="rename")
        old_path = self.registry.resolve_upload_path(old_name)
        new_path = self.registry.resolve_upload_path(new_name)

        try:
            source_missing = not old_path.is_file()
            target_taken = new_path.exists()
        except OSError as e:
            logger.exception("Failed to check %s -> %s", old_name, new_name)
            raise StorageError(
                ErrorCodes.STORAGE_ERROR,
                "Failed to read file metadata",
                name=old_name,
                new_name=new_name,
            ) from e

        if source_missing:
            raise AssetNotFoundError(
                ErrorCodes.ASSET_NOT_FOUND,
                f"File '{old_name}' not found",
                name=old_name,
            )

        if target_taken:
            raise AssetConflictError(
                ErrorCodes.ASSET_EXISTS,
                f"File '{new_name}' already exists",
                name=new_name,
            )

        try:
            old_path.rename(new_path)
        except FileNotFoundError as e:
            raise AssetNotFoundError(
                ErrorCodes.ASSET_NOT_FOUND,
                f"File '{old_name}' not found",
                name=old_name,
            ) from e
        except OSError as e:
            logger.exception("Failed to rename %s -> %s", old_name, new_name)
            raise StorageError(
                ErrorCodes.STORAGE_ERROR,
                "Failed to rename file",
                name=old_name,
                new_name=new_name,
            ) from e

        logger.info("Renamed %s -> %s", old_name, new_name)
        return self.registry.get_uploaded(new_name)

    # =========================================================================
    # Delete
    # =========================================================================

    def delete(self, asset_id: str) -> None:
        """
        uploads/ 파일 삭제.

        Raises:
            AssetValidationError: INVALID_ASSET_ID, INVALID_FILENAME
            StaticAssetForbiddenError: STATIC_ASSET_IMMUTABLE
            AssetNotFoundError: ASSET_NOT_FOUND
            StorageError: 삭제 실패
        """
        name = self._decode_mutable(asset_id, action="delete")
        path = self.registry.resolve_upload_path(name)

        try:
            missing = not path.is_file()
        except OSError as e:
            logger.exception("Failed to check %s", name)
            raise StorageError(
                ErrorCodes.STORAGE_ERROR,
                "Failed to read file metadata",
                name=name,
            ) from e

        if missing:
            raise AssetNotFoundError(
                ErrorCodes.ASSET_NOT_FOUND,
                f"File '{name}' not found",
                name=name,
            )

        try:
            path.unlink()
        except FileNotFoundError as e:
            raise AssetNotFoundError(
                ErrorCodes.ASSET_NOT_FOUND,
                f"File '{name}' not found",
                name=name,
            ) from e
        except OSError as e:
            logger.exception("Failed to delete %s", name)
            raise StorageError(
                ErrorCodes.STORAGE_ERROR,
                "Failed to delete file",
                name=name,
            ) from e

        logger.info("Deleted %s", name)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _decode_mutable(self, asset_id: str, action: str) -> str:
        """id 디코딩 + 정적 파일 가드."""
        decoded = decode_asset_id(asset_id)

        if is_static_name(decoded):
            raise StaticAssetForbiddenError(
                ErrorCodes.STATIC_ASSET_IMMUTABLE,
                f"Statically deployed files cannot be {action}d",
                asset_id=asset_id,
            )

        return decoded
