"""
Opaque ID: 파일명 ↔ asset id 가역 인코딩

규칙:
- id = urlsafe_b64(utf-8(name)), 정적 파일은 name 앞에 "public_" 마커
- decode는 원래 파일명을 그대로 복원 (비ASCII 포함)
- 표준 base64 알파벳, 패딩 누락도 허용 (기존 클라이언트 호환)

알려진 한계:
- 파일명이 곧 정체성 → rename 시 id가 바뀐다
- 충돌 방지 없음: 업로드 파일 "public_x.png"와 정적 파일 "x.png"의 id가 같다
"""

import base64
import binascii

from src.domain.constants import STATIC_ID_PREFIX
from src.domain.errors import AssetValidationError, ErrorCodes


def encode_asset_id(name: str, is_static: bool = False) -> str:
    """
    파일명 → asset id.

    Args:
        name: 디스크상의 파일명
        is_static: 정적 디렉터리 파일 여부 (마커 부착)

    Returns:
        URL 경로에 안전한 id 문자열
    """
    raw = f"{STATIC_ID_PREFIX}{name}" if is_static else name
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_asset_id(asset_id: str) -> str:
    """
    asset id → 인코딩 전 문자열 (정적 마커 포함 가능).

    Args:
        asset_id: encode_asset_id()가 만든 id (표준 base64도 허용)

    Returns:
        디코딩된 문자열

    Raises:
        AssetValidationError: INVALID_ASSET_ID
    """
    if not asset_id:
        raise AssetValidationError(
            ErrorCodes.INVALID_ASSET_ID,
            "Asset id cannot be empty",
        )

    # 표준 알파벳 → urlsafe 알파벳, 패딩 보정
    normalized = asset_id.strip().replace("+", "-").replace("/", "_")
    normalized = normalized.rstrip("=")
    normalized += "=" * (-len(normalized) % 4)

    try:
        decoded = base64.b64decode(normalized, altchars=b"-_", validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        # UnicodeDecodeError는 ValueError 하위 클래스
        raise AssetValidationError(
            ErrorCodes.INVALID_ASSET_ID,
            "Asset id is not a valid encoded filename",
            asset_id=asset_id,
        ) from e

    if not decoded:
        raise AssetValidationError(
            ErrorCodes.INVALID_ASSET_ID,
            "Asset id decodes to an empty filename",
            asset_id=asset_id,
        )
    return decoded


def is_static_name(decoded: str) -> bool:
    """디코딩된 값에 정적 파일 마커가 있는지."""
    return decoded.startswith(STATIC_ID_PREFIX)
