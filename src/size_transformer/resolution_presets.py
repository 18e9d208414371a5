"""出力解像度のプリセットとカスタムサイズの解決。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from .validators import DimensionValidator

DEFAULT_CUSTOM_WIDTH = 1920
DEFAULT_CUSTOM_HEIGHT = 1080
DEFAULT_CUSTOM_SIZE = (DEFAULT_CUSTOM_WIDTH, DEFAULT_CUSTOM_HEIGHT)
DEFAULT_PRESET_ID = "ios"
CUSTOM_PRESET_ID = "custom"


@dataclass(frozen=True)
class ResolutionPreset:
    preset_id: str
    label: str
    size: Optional[tuple[int, int]] = None

    @property
    def is_custom(self) -> bool:
        return self.size is None


def builtin_resolution_presets() -> list[ResolutionPreset]:
    """組み込みプリセット。"""
    return [
        ResolutionPreset(preset_id="ios", label="iOS", size=(1242, 2688)),
        ResolutionPreset(preset_id="macos", label="MacOS", size=(2560, 1600)),
        ResolutionPreset(preset_id=CUSTOM_PRESET_ID, label="Custom"),
    ]


def preset_ids() -> list[str]:
    return [preset.preset_id for preset in builtin_resolution_presets()]


def get_preset(preset_id: str) -> ResolutionPreset:
    """IDまたは表示名（大文字小文字を区別しない）からプリセットを取得する。"""
    key = (preset_id or "").strip().lower()
    for preset in builtin_resolution_presets():
        if key in (preset.preset_id, preset.label.lower()):
            return preset
    raise ValueError(f"未知のプリセットです: {preset_id!r}")


def resolve_target_size(
    preset: Union[str, ResolutionPreset],
    custom_width: Union[int, str, None] = None,
    custom_height: Union[int, str, None] = None,
    *,
    strict: bool = False,
) -> tuple[int, int]:
    """プリセットとカスタム入力から目標サイズを決定する。

    ``strict=False`` の場合、解釈できないカスタム値は幅/高さごとに
    1920x1080 へフォールバックする。``strict=True`` では ``ValueError`` を送出する。
    """
    resolved = get_preset(preset) if isinstance(preset, str) else preset
    if resolved.size is not None:
        return resolved.size

    width = _resolve_dimension(custom_width, DEFAULT_CUSTOM_WIDTH, "幅", strict)
    height = _resolve_dimension(custom_height, DEFAULT_CUSTOM_HEIGHT, "高さ", strict)
    return (width, height)


def _resolve_dimension(
    value: Union[int, str, None],
    fallback: int,
    name: str,
    strict: bool,
) -> int:
    try:
        return DimensionValidator.parse_dimension(value, name)
    except ValueError as e:
        if strict:
            raise
        logger.warning(f"カスタム{name}を解釈できないため {fallback} を使用します: {e}")
        return fallback
