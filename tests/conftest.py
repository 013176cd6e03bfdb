"""
Pytest fixtures for the asset service tests.

테스트 구성:
- uploads/ 와 정적 디렉터리는 tmp_path 아래에 분리
- 앱은 create_app(HostingConfig)로 격리 생성
"""

import os
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from src.core.mutators import AssetMutator
from src.core.registry import AssetRegistry
from src.domain.schemas import HostingConfig

# 1x1 투명 PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)

# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """테스트용 uploads/ 디렉터리."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    """테스트용 정적 디렉터리 (dist/)."""
    path = tmp_path / "dist"
    path.mkdir()
    return path


# =============================================================================
# Core Fixtures
# =============================================================================

@pytest.fixture
def hosting_config(upload_dir: Path, static_dir: Path) -> HostingConfig:
    """테스트용 HostingConfig (업로드 한도 1KB)."""
    return HostingConfig(
        upload_dir=upload_dir,
        static_dir=static_dir,
        max_upload_bytes=1024,
    )


@pytest.fixture
def registry(hosting_config: HostingConfig) -> AssetRegistry:
    """AssetRegistry 인스턴스."""
    return AssetRegistry(hosting_config)


@pytest.fixture
def mutator(hosting_config: HostingConfig, registry: AssetRegistry) -> AssetMutator:
    """AssetMutator 인스턴스."""
    return AssetMutator(hosting_config, registry=registry)


@pytest.fixture
def png_bytes() -> bytes:
    """테스트용 PNG 바이트."""
    return PNG_BYTES


def write_file(path: Path, content: bytes, mtime: float | None = None) -> Path:
    """파일 생성 + (선택) 수정 시각 지정."""
    path.write_bytes(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def make_file():
    """write_file 헬퍼를 fixture로 제공."""
    return write_file


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def client(hosting_config: HostingConfig) -> Generator[TestClient, None, None]:
    """격리된 디렉터리를 쓰는 FastAPI TestClient."""
    from src.app.main import create_app

    app = create_app(hosting=hosting_config, config={})
    with TestClient(app) as client:
        yield client
