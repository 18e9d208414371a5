#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
画像一括リサイズツールのコア機能モジュール

フォルダー内の対応画像を指定サイズへ引き伸ばしてリサイズし、
PNGとして出力フォルダーへ書き出します。CLIのエントリーポイントも提供します。
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Optional, Union

from loguru import logger
from PIL import Image

from .image_save_pipeline import save_png
from .job_models import (
    EXIT_FATAL,
    SUPPORTED_EXTENSIONS,
    JobRequest,
    RunResult,
)
from .operation_flow import BatchOperation, DirectoryAccessScope, OperationScopeHooks
from .resolution_presets import (
    CUSTOM_PRESET_ID,
    DEFAULT_CUSTOM_HEIGHT,
    DEFAULT_CUSTOM_WIDTH,
    DEFAULT_PRESET_ID,
    preset_ids,
    resolve_target_size,
)
from .runtime_logging import create_run_log_artifacts, setup_logging, write_run_summary
from .validators import PathValidator

PathLike = Union[str, Path]

# 大きなパノラマやスキャン画像も扱えるよう、Pillowの既定(約8900万画素)より緩める
MAX_IMAGE_PIXELS = 1_000_000_000
Image.MAX_IMAGE_PIXELS = MAX_IMAGE_PIXELS

_HIGH_BIT_DEPTH_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


def find_image_files(input_dir: PathLike) -> list[Path]:
    """フォルダー直下の対応画像ファイルを名前順で返す（再帰しない）。

    Raises:
        OSError: フォルダーの一覧を取得できない場合
    """
    directory = Path(input_dir)
    entries = list(directory.iterdir())
    return sorted(
        (path for path in entries if path.is_file() and PathValidator.is_image_file(path)),
        key=lambda p: p.name,
    )


def get_destination_path(source_path: PathLike, dest_dir: PathLike) -> Path:
    """出力先パスを返す。拡張子は元のまま（内容はPNG）。"""
    return Path(dest_dir) / Path(source_path).name


def _to_8bit(img: Image.Image) -> Image.Image:
    """16bit/32bitのグレースケール画像を8bitの "L" へ縮める。その他のモードはそのまま返す。"""
    if img.mode in _HIGH_BIT_DEPTH_MODES:
        # 16bitの値域(0-65535)を8bitへ。"I" への変換はどのI;16系からも可能
        return img.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    if img.mode == "F":
        _, max_value = img.getextrema()
        scale = 255 if max_value <= 1.0 else 1 / 256
        return img.point(lambda v: v * scale).convert("L")
    return img


def resize_image(
    source_path: PathLike,
    dest_path: PathLike,
    width: int,
    height: int,
) -> bool:
    """画像の先頭フレームを width x height へ引き伸ばし、PNGで保存します

    縦横比は維持しません。失敗はすべて ``False`` として返し、例外は送出しません。

    Args:
        source_path: 入力画像のパス
        dest_path: 出力先のパス（既存ファイルは上書き）
        width: 目標幅（px）
        height: 目標高さ（px）

    Returns:
        bool: 保存まで成功したかどうか
    """
    if width <= 0 or height <= 0:
        logger.error(f"無効な目標サイズです: {width}x{height}")
        return False

    source = Path(source_path)
    try:
        with Image.open(source) as img:
            img.seek(0)
            img.load()
            original_size = img.size
            # RGBAのリサンプリングはPillow内部で乗算済みアルファとして処理される
            rgba = _to_8bit(img).convert("RGBA")
        resized = rgba.resize((width, height), Image.Resampling.LANCZOS)
    except Exception as e:
        logger.warning(f"画像を読み込めません: {source.name}: {e}")
        return False

    result = save_png(resized, Path(dest_path))
    if result.success:
        logger.debug(
            f"{source.name}: {original_size[0]}x{original_size[1]} -> {width}x{height}"
        )
    return result.success


def run_batch(request: JobRequest) -> RunResult:
    """入力フォルダー内の対応画像をすべてリサイズし、件数を集計する。"""
    succeeded = 0
    failed_files: list[str] = []

    with DirectoryAccessScope(request.input_dir, request.output_dir) as access:
        try:
            image_paths = find_image_files(request.input_dir)
        except OSError as e:
            logger.error(f"入力フォルダーを読み込めません: {request.input_dir}: {e}")
            return RunResult.listing_failed(str(e))

        access.ensure_output_dir()

        logger.info(
            f"処理開始: {request.input_dir} -> {request.output_dir} "
            f"({request.width}x{request.height}, {len(image_paths)}件)"
        )

        for source_path in image_paths:
            dest_path = get_destination_path(source_path, request.output_dir)
            if resize_image(source_path, dest_path, request.width, request.height):
                succeeded += 1
            else:
                failed_files.append(source_path.name)

    result = RunResult(
        succeeded=succeeded,
        failed=len(failed_files),
        failed_files=tuple(failed_files),
    )
    if result.failed:
        logger.warning(f"{result.failed} 件の画像が失敗しました (成功 {result.succeeded} 件)")
    else:
        logger.success(f"すべての画像を処理しました ({result.succeeded} 件)")
    return result


# ----------------------------------------------------------------------
# CLI Entry Point
# ----------------------------------------------------------------------


def _build_arg_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI use."""
    p = argparse.ArgumentParser(
        prog="size-transformer",
        description="フォルダー内の画像を指定サイズへ一括リサイズし、PNGで保存するツール",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    p.add_argument("-s", "--source", required=True, help="入力フォルダー (画像を含む)")
    p.add_argument("-d", "--dest", required=True, help="出力フォルダー")
    p.add_argument(
        "-p",
        "--preset",
        type=str.lower,
        choices=preset_ids(),
        default=DEFAULT_PRESET_ID,
        help="解像度プリセット",
    )
    p.add_argument(
        "-W", "--width", default=str(DEFAULT_CUSTOM_WIDTH), help="カスタム幅(px)。--preset custom のときのみ使用"
    )
    p.add_argument(
        "-H", "--height", default=str(DEFAULT_CUSTOM_HEIGHT), help="カスタム高さ(px)。--preset custom のときのみ使用"
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="カスタムサイズを解釈できない場合、1920x1080へフォールバックせずエラーにする",
    )
    p.add_argument("--json", action="store_true", help="結果のsummaryをJSONで標準出力へ書き出す")
    p.add_argument("--no-log-file", action="store_true", help="実行ログ/summaryファイルを作成しない")
    p.add_argument("--verbose", "-v", action="count", default=0, help="詳細ログを増やす (重ね掛け可)")
    return p


def _console_level(verbose: int) -> str:
    if verbose >= 2:
        return "TRACE"
    if verbose == 1:
        return "DEBUG"
    return "INFO"


def _build_cli_summary(
    *,
    request: JobRequest,
    result: RunResult,
    preset: str,
    elapsed_seconds: float,
) -> dict[str, Any]:
    return {
        "status": result.status.value,
        "status_text": result.status_text,
        "exit_code": result.exit_code,
        "source": str(request.input_dir),
        "dest": str(request.output_dir),
        "options": {
            "preset": preset,
            "width": request.width,
            "height": request.height,
            "extensions": list(SUPPORTED_EXTENSIONS),
        },
        "succeeded": result.succeeded,
        "failed": result.failed,
        "failed_files": list(result.failed_files),
        "error": result.error,
        "elapsed_seconds": round(elapsed_seconds, 3),
    }


def _cli_status_hooks() -> OperationScopeHooks:
    return OperationScopeHooks(
        set_controls_enabled=lambda _enabled: None,
        show_status=lambda text: logger.info(f"状態: {text}"),
    )


def main(argv: Optional[list[str]] = None) -> int:
    """CLI を実行し、終了コードを返す"""

    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    artifacts = None
    if not args.no_log_file:
        try:
            artifacts = create_run_log_artifacts()
        except OSError as e:
            print(f"ログフォルダーを作成できません: {e}", file=sys.stderr)
    setup_logging(
        console_level=_console_level(args.verbose),
        log_file=artifacts.run_log_path if artifacts else None,
    )

    try:
        width, height = resolve_target_size(args.preset, args.width, args.height, strict=args.strict)
        request = JobRequest.create(args.source, args.dest, width, height)
    except ValueError as e:
        parser.error(str(e))

    if args.preset == CUSTOM_PRESET_ID:
        logger.debug(f"カスタムサイズ: {args.width!r} x {args.height!r} -> {width}x{height}")

    start_time = time.time()
    operation = BatchOperation(run_batch, hooks=_cli_status_hooks())
    operation.start(request)
    result = operation.wait()
    if result is None:  # pragma: no cover - wait() はタイムアウトなしでは必ず結果を返す
        return EXIT_FATAL
    elapsed = time.time() - start_time

    summary = _build_cli_summary(
        request=request,
        result=result,
        preset=args.preset,
        elapsed_seconds=elapsed,
    )
    if artifacts is not None:
        try:
            write_run_summary(artifacts.summary_path, summary)
        except OSError as e:
            logger.warning(f"summaryを保存できません: {e}")

    if args.json:
        print(json.dumps(summary, ensure_ascii=False, indent=2))
    else:
        print(result.status_text)
        for name in result.failed_files:
            print(f"  失敗: {name}")

    return result.exit_code
