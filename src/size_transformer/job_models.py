"""一括リサイズのリクエストと実行結果。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

SUPPORTED_EXTENSIONS: tuple[str, ...] = ("png", "jpg", "jpeg", "tiff", "bmp")

EXIT_SUCCESS = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_FATAL = 2


class RunStatus(Enum):
    READY = "ready"
    WORKING = "working"
    SUCCESS = "success"
    DONE_WITH_ERRORS = "done_with_errors"
    ERROR = "error"


STATUS_READY_TEXT = "Ready"
STATUS_WORKING_TEXT = "Working..."
STATUS_DONE_WITH_ERRORS_TEXT = "Done with errors"
STATUS_ERROR_TEXT = "Error"


@dataclass(frozen=True)
class JobRequest:
    """1回の実行で扱う入力/出力フォルダーと目標サイズ。"""

    input_dir: Path
    output_dir: Path
    width: int
    height: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_dir", Path(self.input_dir))
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name}は正の整数で指定してください: {value!r}")

    @classmethod
    def create(
        cls,
        input_dir: Union[str, Path],
        output_dir: Union[str, Path],
        width: int,
        height: int,
    ) -> "JobRequest":
        return cls(Path(input_dir), Path(output_dir), width, height)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class RunResult:
    """一括処理の集計結果。

    ``error`` が空でない場合はフォルダー一覧の取得に失敗しており、
    件数はどちらも0になる。
    """

    succeeded: int = 0
    failed: int = 0
    failed_files: tuple[str, ...] = ()
    error: str = ""

    @classmethod
    def listing_failed(cls, message: str) -> "RunResult":
        return cls(error=message or "unknown error")

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed

    @property
    def status(self) -> RunStatus:
        if self.error:
            return RunStatus.ERROR
        if self.failed > 0:
            return RunStatus.DONE_WITH_ERRORS
        return RunStatus.SUCCESS

    @property
    def status_text(self) -> str:
        return status_text_for(self.status, self.succeeded)

    @property
    def exit_code(self) -> int:
        status = self.status
        if status is RunStatus.ERROR:
            return EXIT_FATAL
        if status is RunStatus.DONE_WITH_ERRORS:
            return EXIT_PARTIAL_FAILURE
        return EXIT_SUCCESS


def status_text_for(status: RunStatus, succeeded: int = 0) -> str:
    """状態表示用の文字列を返す。"""
    if status is RunStatus.READY:
        return STATUS_READY_TEXT
    if status is RunStatus.WORKING:
        return STATUS_WORKING_TEXT
    if status is RunStatus.SUCCESS:
        return f"Success ({succeeded})"
    if status is RunStatus.DONE_WITH_ERRORS:
        return STATUS_DONE_WITH_ERRORS_TEXT
    return STATUS_ERROR_TEXT
