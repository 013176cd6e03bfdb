"""
App layer: HTTP 서버 (FastAPI).

역할:
- /api/files CRUD, /api/health
- /uploads/<name>, /<name> 파일 서빙
- AssetError → {success: false, error} 변환
- ⚠️ 파일시스템 로직 없음 (core에 위임)
"""
