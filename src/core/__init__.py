"""
Core layer: 파일시스템 기반 에셋 조회/변경.

역할:
- opaque id 인코딩/디코딩
- 디렉터리 스캔 (AssetRegistry)
- upload/rename/delete (AssetMutator)
"""

from .ids import decode_asset_id, encode_asset_id, is_static_name
from .mutators import AssetMutator
from .registry import AssetRegistry, ensure_bare_filename

__all__ = [
    # ids
    "encode_asset_id",
    "decode_asset_id",
    "is_static_name",
    # registry
    "AssetRegistry",
    "ensure_bare_filename",
    # mutators
    "AssetMutator",
]
