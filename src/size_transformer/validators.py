"""
入力値検証のためのユーティリティモジュール
"""
from pathlib import Path
from typing import Union

from .job_models import SUPPORTED_EXTENSIONS


class PathValidator:
    """パス検証クラス"""

    @classmethod
    def is_image_file(cls, filepath: Union[str, Path]) -> bool:
        """対応拡張子の画像ファイルかチェック（大文字小文字は区別しない）"""
        suffix = Path(filepath).suffix.lower().lstrip(".")
        return suffix in SUPPORTED_EXTENSIONS


class DimensionValidator:
    """幅・高さの検証クラス"""

    # PNGの仕様上はさらに大きくできるが、実用上の上限として扱う
    MAX_DIMENSION = 65535

    @classmethod
    def parse_dimension(cls, value: Union[int, str, None], name: str = "値") -> int:
        """幅/高さを正の整数として解釈する

        Raises:
            ValueError: 整数として解釈できない、または範囲外の場合
        """
        if value is None:
            raise ValueError(f"{name}が入力されていません")

        if isinstance(value, bool):
            raise ValueError(f"{name}は整数を入力してください")

        if isinstance(value, str):
            text = value.strip()
            if not text:
                raise ValueError(f"{name}が入力されていません")
            if not text.isdigit():
                raise ValueError(f"{name}は整数を入力してください: {value!r}")
            value = int(text)

        if not isinstance(value, int):
            raise ValueError(f"{name}は整数を入力してください")

        if not 1 <= value <= cls.MAX_DIMENSION:
            raise ValueError(f"{name}は1から{cls.MAX_DIMENSION}の範囲で入力してください")

        return value
