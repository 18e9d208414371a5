from __future__ import annotations

import pytest

from size_transformer.resolution_presets import (
    DEFAULT_CUSTOM_SIZE,
    get_preset,
    preset_ids,
    resolve_target_size,
)
from size_transformer.validators import DimensionValidator


def test_builtin_presets() -> None:
    assert preset_ids() == ["ios", "macos", "custom"]
    assert get_preset("ios").size == (1242, 2688)
    assert get_preset("MacOS").size == (2560, 1600)
    assert get_preset("Custom").is_custom is True


def test_get_preset_unknown_raises() -> None:
    with pytest.raises(ValueError):
        get_preset("android")


def test_fixed_preset_ignores_custom_values() -> None:
    assert resolve_target_size("ios", "10", "20") == (1242, 2688)


def test_custom_values_are_parsed() -> None:
    assert resolve_target_size("custom", " 800 ", 600) == (800, 600)


@pytest.mark.parametrize(
    "width, height, expected",
    [
        ("abc", "720", (1920, 720)),
        ("640", "", (640, 1080)),
        (None, None, DEFAULT_CUSTOM_SIZE),
        ("-5", "0", DEFAULT_CUSTOM_SIZE),
        ("12.5", "99999999", DEFAULT_CUSTOM_SIZE),
    ],
)
def test_lenient_mode_falls_back_per_dimension(width, height, expected) -> None:
    assert resolve_target_size("custom", width, height) == expected


def test_strict_mode_raises() -> None:
    with pytest.raises(ValueError):
        resolve_target_size("custom", "abc", "720", strict=True)


@pytest.mark.parametrize("value", ["", "  ", "1e3", "0", 0, -1, True, 3.5, DimensionValidator.MAX_DIMENSION + 1])
def test_parse_dimension_rejects(value) -> None:
    with pytest.raises(ValueError):
        DimensionValidator.parse_dimension(value, "幅")


def test_parse_dimension_accepts() -> None:
    assert DimensionValidator.parse_dimension("1", "幅") == 1
    assert DimensionValidator.parse_dimension(DimensionValidator.MAX_DIMENSION) == DimensionValidator.MAX_DIMENSION
