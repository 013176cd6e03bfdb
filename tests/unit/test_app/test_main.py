"""
test_main.py - 앱 진입점 테스트

DoD:
- load_config: 파일 없음 → {}, 있으면 yaml 로드
- build_hosting_config: 환경 변수 UPLOAD_DIR 반영
- /api/health
- /uploads/<name>, /<name> 파일 서빙, SPA 폴백, 알 수 없는 API → JSON 404
- lifespan에서 uploads/ 생성
- 정적 디렉터리 밖으로 나가는 경로는 거부
- 처리되지 않은 OSError → JSON 500 STORAGE_ERROR
"""

from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from src.app.main import PROJECT_ROOT, build_hosting_config, create_app, load_config
from src.core.registry import AssetRegistry
from src.domain.schemas import HostingConfig

# =============================================================================
# Configuration
# =============================================================================


class TestLoadConfig:
    """load_config 테스트."""

    def test_missing_file_returns_empty(self, tmp_path: Path):
        assert load_config(tmp_path / "missing.yaml") == {}

    def test_empty_file_returns_empty(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == {}

    def test_loads_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("storage:\n  upload_dir: /data/uploads\n", encoding="utf-8")

        assert load_config(path) == {"storage": {"upload_dir": "/data/uploads"}}

    def test_default_config_present(self):
        config = load_config()

        assert config["storage"]["upload_dir"] == "uploads"


class TestBuildHostingConfig:
    """build_hosting_config 테스트."""

    def test_env_upload_dir(self, tmp_path: Path):
        hosting = build_hosting_config({}, env={"UPLOAD_DIR": str(tmp_path)})

        assert hosting.upload_dir == tmp_path

    def test_relative_to_project_root(self):
        hosting = build_hosting_config({}, env={})

        assert hosting.upload_dir == PROJECT_ROOT / "uploads"
        assert hosting.static_dir == PROJECT_ROOT / "dist"


# =============================================================================
# Health / Lifespan
# =============================================================================


class TestHealth:
    """헬스 체크 테스트."""

    def test_health(self, client, upload_dir: Path):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["timestamp"]
        assert data["uploadDir"] == str(upload_dir)

    def test_lifespan_creates_upload_dir(self, tmp_path: Path):
        hosting = HostingConfig(upload_dir=tmp_path / "later" / "uploads", static_dir=tmp_path)
        app = create_app(hosting=hosting, config={})

        with TestClient(app) as client:
            assert client.get("/api/health").status_code == 200

        assert hosting.upload_dir.is_dir()


# =============================================================================
# File Serving
# =============================================================================


class TestFileServing:
    """업로드/정적 파일 서빙 테스트."""

    def test_serves_uploaded_file(self, client, upload_dir: Path, make_file):
        make_file(upload_dir / "a.png", b"uploaded-bytes")

        response = client.get("/uploads/a.png")

        assert response.status_code == 200
        assert response.content == b"uploaded-bytes"

    def test_serves_quoted_upload_url(self, client, png_bytes: bytes):
        """목록의 url 그대로 요청 가능."""
        client.post("/api/files/upload", files={"file": ("my photo.png", png_bytes, "image/png")})
        url = client.get("/api/files").json()["files"][0]["url"]

        response = client.get(url)

        assert response.status_code == 200
        assert response.content == png_bytes

    def test_serves_static_file_at_root(self, client, static_dir: Path, make_file):
        make_file(static_dir / "banner.svg", b"<svg/>")

        response = client.get("/banner.svg")

        assert response.status_code == 200
        assert response.content == b"<svg/>"
        assert response.headers["content-type"].startswith("image/svg+xml")

    def test_spa_fallback(self, client, static_dir: Path, make_file):
        make_file(static_dir / "index.html", b"<html>app</html>")

        for path in ["/", "/gallery/settings"]:
            response = client.get(path)
            assert response.status_code == 200
            assert response.content == b"<html>app</html>"

    def test_no_index_returns_404(self, client):
        response = client.get("/nothing-here")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_unknown_api_path_not_spa(self, client, static_dir: Path, make_file):
        make_file(static_dir / "index.html", b"<html>app</html>")

        response = client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found"}

    def test_symlink_outside_static_dir_refused(self, client, tmp_path: Path, static_dir: Path):
        secret = tmp_path / "secret.png"
        secret.write_bytes(b"outside-secret")
        (static_dir / "leak.png").symlink_to(secret)

        response = client.get("/leak.png")

        assert response.status_code in (400, 404)
        assert b"outside-secret" not in response.content

    def test_encoded_parent_path_refused(self, client, tmp_path: Path, static_dir: Path, make_file):
        (tmp_path / "secret.png").write_bytes(b"outside-secret")
        make_file(static_dir / "index.html", b"<html>app</html>")

        for path in ["/%2e%2e/secret.png", "/..%2fsecret.png", "/%2e%2e%2fsecret.png"]:
            response = client.get(path)
            assert b"outside-secret" not in response.content
            assert response.status_code in (200, 400, 404)

    def test_overlong_path_falls_back(self, client, static_dir: Path, make_file):
        """조회 불가한 긴 경로 → 없는 파일 취급 (SPA 폴백)."""
        make_file(static_dir / "index.html", b"<html>app</html>")

        response = client.get("/" + "n" * 300 + ".png")

        assert response.status_code == 200
        assert response.content == b"<html>app</html>"


# =============================================================================
# Error Handlers
# =============================================================================


class TestErrorHandlers:
    """예외 → JSON 응답 변환."""

    def test_unhandled_os_error_returns_storage_error(self, client):
        with patch.object(AssetRegistry, "list_assets", side_effect=OSError("disk gone")):
            response = client.get("/api/files")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Storage operation failed",
            "code": "STORAGE_ERROR",
        }
