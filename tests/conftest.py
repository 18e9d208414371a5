#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
pytest設定ファイル
共通のフィクスチャやテスト設定を定義
"""

import pytest
from pathlib import Path
from PIL import Image
from loguru import logger


@pytest.fixture
def input_dir(tmp_path):
    path = tmp_path / "input"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "output"
    path.mkdir()
    return path


@pytest.fixture
def sample_images(input_dir):
    """様々なフォーマット・縦横比のサンプル画像を作成するフィクスチャ"""
    images = {}

    # 正方形PNG
    png_path = input_dir / "a.png"
    Image.new("RGBA", (100, 100), color=(0, 255, 0, 255)).save(png_path, "PNG")
    images["png"] = png_path

    # 縦長JPEG
    jpeg_path = input_dir / "b.jpg"
    Image.new("RGB", (50, 200), color=(255, 0, 0)).save(jpeg_path, "JPEG", quality=95)
    images["jpeg"] = jpeg_path

    # 対象外のテキスト
    notes_path = input_dir / "notes.txt"
    notes_path.write_text("not an image", encoding="utf-8")
    images["notes"] = notes_path

    return images


@pytest.fixture
def corrupt_image(input_dir) -> Path:
    """対応拡張子だが中身が画像ではないファイル"""
    path = input_dir / "broken.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nthis is not really a png")
    return path


@pytest.fixture
def isolated_logs(tmp_path, monkeypatch):
    """実行ログの保存先をテスト用ディレクトリへ向ける"""
    monkeypatch.setenv("SIZE_TRANSFORMER_LOG_DIR", str(tmp_path / "logs"))
    return tmp_path


@pytest.fixture(autouse=True)
def reset_loguru():
    """テストごとにloguruのハンドラーを外し、キャプチャ済みストリームを参照させない"""
    yield
    logger.remove()
