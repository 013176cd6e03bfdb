"""
Files Routes: 에셋 목록/업로드/이름 변경/삭제.

- GET    /api/files               → 전체 목록
- POST   /api/files/upload        → 업로드 (multipart field "file")
- PUT    /api/files/{id}/rename   → 이름 변경 ({"newName": ...})
- DELETE /api/files/{id}          → 삭제

에러는 AssetError로 올리고, main.py의 핸들러가
{success: false, error, code} 로 변환한다.
"""

from typing import Any

from fastapi import APIRouter, File, Request, UploadFile

from src.core.mutators import AssetMutator
from src.core.registry import AssetRegistry
from src.domain.errors import AssetValidationError, ErrorCodes


api_router = APIRouter()


def get_registry(request: Request) -> AssetRegistry:
    """Request에서 AssetRegistry 가져오기."""
    return request.app.state.registry


def get_mutator(request: Request) -> AssetMutator:
    """Request에서 AssetMutator 가져오기."""
    return request.app.state.mutator


# =============================================================================
# API Routes
# =============================================================================

@api_router.get("")
async def list_files(request: Request) -> dict[str, Any]:
    """전체 에셋 목록 (수정 시각 내림차순)."""
    assets = get_registry(request).list_assets()
    return {
        "success": True,
        "files": [asset.to_dict() for asset in assets],
    }


@api_router.post("/upload")
async def upload_file(
    request: Request,
    file: UploadFile | None = File(None),
) -> dict[str, Any]:
    """
    이미지 업로드.

    크기 검사를 위해 한도 + 1 바이트까지만 읽는다.
    """
    if file is None or not file.filename:
        raise AssetValidationError(
            ErrorCodes.NO_FILE,
            "Please choose a file to upload",
        )

    mutator = get_mutator(request)
    try:
        file_bytes = await file.read(mutator.config.max_upload_bytes + 1)
    finally:
        await file.close()

    asset = mutator.upload(
        file_bytes=file_bytes,
        declared_name=file.filename,
        mime_type=file.content_type or "",
    )
    return {"success": True, "file": asset.to_dict()}


@api_router.put("/{asset_id:path}/rename")
async def rename_file(request: Request, asset_id: str) -> dict[str, Any]:
    """이름 변경. body: {"newName": "..."}"""
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict):
        raise AssetValidationError(
            ErrorCodes.INVALID_REQUEST,
            "Request body must be a JSON object",
        )

    new_name = payload.get("newName")
    if new_name is not None and not isinstance(new_name, str):
        raise AssetValidationError(
            ErrorCodes.INVALID_REQUEST,
            "newName must be a string",
        )

    asset = get_mutator(request).rename(asset_id, new_name)
    return {"success": True, "file": asset.to_dict()}


@api_router.delete("/{asset_id:path}")
async def delete_file(request: Request, asset_id: str) -> dict[str, Any]:
    """삭제."""
    get_mutator(request).delete(asset_id)
    return {"success": True, "message": "File deleted"}
