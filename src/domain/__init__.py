"""Domain layer: errors and schemas."""

from .errors import (
    AssetConflictError,
    AssetError,
    AssetNotFoundError,
    AssetValidationError,
    StaticAssetForbiddenError,
    StorageError,
)
from .schemas import Asset, HostingConfig

__all__ = [
    "AssetError",
    "AssetValidationError",
    "AssetNotFoundError",
    "AssetConflictError",
    "StaticAssetForbiddenError",
    "StorageError",
    "Asset",
    "HostingConfig",
]
