"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run python -m src.app.main
"""

import logging
import os
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.app.routes import files
from src.core.mutators import AssetMutator
from src.core.registry import AssetRegistry
from src.domain.constants import (
    PORT_ENV,
    SPA_INDEX_FILENAME,
    UPLOADS_URL_PREFIX,
    get_mime_type,
)
from src.domain.errors import AssetError, ErrorCodes
from src.domain.schemas import HostingConfig

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = PROJECT_ROOT / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def build_hosting_config(
    config: Mapping[str, Any],
    env: Mapping[str, str] | None = None,
) -> HostingConfig:
    """설정 dict + 환경 변수(UPLOAD_DIR, STATIC_DIR) → HostingConfig."""
    return HostingConfig.from_dict(
        config,
        base_dir=PROJECT_ROOT,
        env=os.environ if env is None else env,
    )


def configure_logging(config: Mapping[str, Any]) -> None:
    """logging.level 설정으로 루트 로거 구성."""
    level = str((config.get("logging") or {}).get("level", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# =============================================================================
# Error Handlers
# =============================================================================


async def handle_asset_error(request: Request, exc: AssetError) -> JSONResponse:
    """AssetError → {success: false, error, code}."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """FastAPI 요청 검증 실패도 같은 형태로."""
    logger.warning("%s %s invalid request: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Invalid request",
            "code": ErrorCodes.INVALID_REQUEST,
        },
    )


async def handle_os_error(request: Request, exc: OSError) -> JSONResponse:
    """처리되지 않은 파일시스템 에러 → 500 STORAGE_ERROR."""
    logger.error(
        "%s %s storage failure: %s", request.method, request.url.path, exc, exc_info=exc
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Storage operation failed",
            "code": ErrorCodes.STORAGE_ERROR,
        },
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """HTTPException (404 등) → {success: false, error}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def _is_servable(path: Path) -> bool:
    """일반 파일 여부. 너무 긴 이름 등 조회 불가한 경로는 없는 파일로 본다."""
    try:
        return path.is_file()
    except OSError as e:
        logger.debug("Cannot stat %s: %s", path, e)
        return False


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    hosting: HostingConfig | None = None,
    config: dict | None = None,
) -> FastAPI:
    """
    FastAPI 앱 생성.

    Args:
        hosting: 디렉터리/정책 설정 (없으면 config + 환경 변수에서 생성)
        config: default.yaml 내용 (없으면 로드)

    Returns:
        FastAPI 인스턴스
    """
    if config is None:
        config = load_config()
    if hosting is None:
        hosting = build_hosting_config(config)

    registry = AssetRegistry(hosting)
    mutator = AssetMutator(hosting, registry=registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        애플리케이션 생명주기 관리.

        시작 시: 업로드 디렉터리 생성
        """
        hosting.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Upload directory: %s", hosting.upload_dir)
        logger.info("Static directory: %s", hosting.static_dir)

        yield

    app = FastAPI(
        title="Image Asset Hosting",
        description="이미지 업로드/목록/이름 변경/삭제 + 파일 서빙",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.hosting = hosting
    app.state.registry = registry
    app.state.mutator = mutator

    app.add_exception_handler(AssetError, handle_asset_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(OSError, handle_os_error)

    # API 라우트
    app.include_router(files.api_router, prefix="/api/files", tags=["Files API"])

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
            "uploadDir": str(hosting.upload_dir),
        }

    # 업로드 파일 서빙 (디렉터리는 lifespan에서 생성)
    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=hosting.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_static(full_path: str) -> FileResponse:
        """정적 디렉터리 파일 서빙, 없으면 index.html (SPA 폴백)."""
        if full_path == "api" or full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not Found")

        static_dir = hosting.static_dir
        if full_path:
            candidate = static_dir / full_path
            if _is_servable(candidate):
                # 경로 순회 방지 (symlink 포함)
                try:
                    candidate.resolve(strict=True).relative_to(static_dir.resolve())
                except (ValueError, OSError):
                    raise HTTPException(status_code=400, detail="Invalid file path") from None
                return FileResponse(candidate, media_type=get_mime_type(candidate.name))

        index_path = static_dir / SPA_INDEX_FILENAME
        if _is_servable(index_path):
            return FileResponse(index_path, media_type="text/html")

        raise HTTPException(status_code=404, detail="Not Found")

    return app


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    server_config = app.state.config.get("server") or {}
    configure_logging(app.state.config)

    uvicorn.run(
        "src.app.main:app",
        host=server_config.get("host", DEFAULT_HOST),
        port=int(os.environ.get(PORT_ENV) or server_config.get("port", DEFAULT_PORT)),
    )
