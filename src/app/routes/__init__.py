"""
FastAPI Routes.

API 라우트 (REST, JSON)
"""

from . import files

__all__ = ["files"]
