"""リサイズ結果をPNGとして保存するパイプライン。

一時ファイルへ書き出してから置換するため、失敗時に壊れた出力を残さない。
"""

from __future__ import annotations

from dataclasses import dataclass
import os
import time
from pathlib import Path
import uuid
from typing import Any, Dict, Optional, Tuple

from loguru import logger
from PIL import Image

_NO_SPACE_CODES = {28, 112, 122}
_PERMISSION_CODES = {5, 13, 30}
_NOT_FOUND_CODES = {2, 3}


@dataclass(frozen=True)
class SaveResult:
    success: bool
    output_path: Path
    error_category: str = ""
    error_message: str = ""


def _build_temp_save_path(target_path: Path) -> Path:
    """同一ディレクトリ内の一時保存パスを作る。"""
    base_name = target_path.name or "size_transformer_output"
    token = f"{os.getpid()}_{time.time_ns()}_{uuid.uuid4().hex[:10]}"
    return target_path.with_name(f".{base_name}.{token}.tmp")


def _analyze_file_error(error: BaseException) -> Tuple[Optional[int], str]:
    """保存エラーを分類する。

    Returns:
        (error_code, error_category)
    """
    if not isinstance(error, OSError):
        return None, "unknown"

    win_error = getattr(error, "winerror", None)
    code = win_error if os.name == "nt" and win_error else getattr(error, "errno", None)
    if not isinstance(code, int):
        return None, "unknown"

    if isinstance(error, FileNotFoundError) or code in _NOT_FOUND_CODES:
        return code, "not_found"
    if isinstance(error, PermissionError) or code in _PERMISSION_CODES:
        return code, "permission_denied"
    if code in _NO_SPACE_CODES:
        return code, "no_space"
    return code, "unknown"


def _save_with_atomic_replace(
    save_img: Image.Image,
    final_path: Path,
    save_kwargs: Dict[str, Any],
) -> None:
    """保存を一時ファイル→置換で実行し、壊れた最終ファイルを防ぐ。"""
    tmp_path = _build_temp_save_path(final_path)
    try:
        # 一時ファイルの拡張子から形式を推定させないため format を明示しておく
        save_img.save(tmp_path, **save_kwargs)
        os.replace(str(tmp_path), str(final_path))
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                logger.warning(f"一時保存ファイルの削除に失敗: {tmp_path}")


def build_png_save_kwargs() -> Dict[str, Any]:
    return {"format": "PNG", "compress_level": 6}


def save_png(image: Image.Image, dest_path: Path) -> SaveResult:
    """画像をPNGで保存する。出力先の拡張子に関係なく内容は常にPNG。"""
    final_path = Path(dest_path)
    try:
        _save_with_atomic_replace(
            save_img=image,
            final_path=final_path,
            save_kwargs=build_png_save_kwargs(),
        )
    except Exception as e:
        code, category = _analyze_file_error(e)
        logger.warning(f"PNG保存に失敗しました ({category}, code={code}): {final_path}: {e}")
        return SaveResult(
            success=False,
            output_path=final_path,
            error_category=category,
            error_message=str(e),
        )
    return SaveResult(success=True, output_path=final_path)
