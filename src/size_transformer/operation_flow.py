from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from .job_models import (
    STATUS_READY_TEXT,
    STATUS_WORKING_TEXT,
    JobRequest,
    RunResult,
)


@dataclass(frozen=True)
class OperationScopeHooks:
    set_controls_enabled: Callable[[bool], None]
    show_status: Callable[[str], None]


class OperationScope:
    """操作中はコントロールを無効化し、終了時に最終状態を表示する。"""

    def __init__(self, *, hooks: OperationScopeHooks, working_text: str = STATUS_WORKING_TEXT) -> None:
        self._hooks = hooks
        self._working_text = working_text
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def begin(self) -> None:
        if self._active:
            return
        self._hooks.set_controls_enabled(False)
        self._hooks.show_status(self._working_text)
        self._active = True

    def close(self, final_text: str = STATUS_READY_TEXT) -> None:
        if not self._active:
            return
        self._hooks.show_status(final_text)
        self._hooks.set_controls_enabled(True)
        self._active = False

    def __enter__(self) -> "OperationScope":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


class DirectoryAccessScope:
    """入力/出力フォルダーへのアクセスを実行中だけ確保する。"""

    def __init__(self, input_dir: Path, output_dir: Path) -> None:
        self.input_dir = Path(input_dir)
        self.output_dir = Path(output_dir)
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def acquire(self) -> None:
        if self._active:
            return
        self._active = True
        logger.debug(f"フォルダーアクセス開始: {self.input_dir} -> {self.output_dir}")

    def ensure_output_dir(self) -> None:
        """出力フォルダーを作成する。入力一覧の取得後に呼ぶ。"""
        # 作成失敗は致命的にしない（書き込みがファイル単位で失敗する）
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"出力フォルダーを作成できません: {self.output_dir}: {e}")

    def release(self) -> None:
        if not self._active:
            return
        self._active = False
        logger.debug(f"フォルダーアクセス終了: {self.input_dir} -> {self.output_dir}")

    def __enter__(self) -> "DirectoryAccessScope":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False


class BatchOperation:
    """一括処理を1本のワーカースレッドで実行し、完了時に1度だけ結果を通知する。

    ``dispatch`` を渡すと完了コールバックをその関数経由で呼ぶ
    （例: ``lambda fn: root.after(0, fn)`` でGUIスレッドへ戻す）。
    """

    def __init__(
        self,
        runner: Callable[[JobRequest], RunResult],
        *,
        on_complete: Optional[Callable[[RunResult], None]] = None,
        dispatch: Optional[Callable[[Callable[[], None]], None]] = None,
        hooks: Optional[OperationScopeHooks] = None,
    ) -> None:
        self._runner = runner
        self._on_complete = on_complete
        self._dispatch = dispatch
        self._scope = OperationScope(hooks=hooks) if hooks is not None else None
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._done.set()
        self._thread: Optional[threading.Thread] = None
        self._result: Optional[RunResult] = None
        self._status_text = STATUS_READY_TEXT

    @property
    def running(self) -> bool:
        return not self._done.is_set()

    @property
    def status_text(self) -> str:
        return self._status_text

    @property
    def result(self) -> Optional[RunResult]:
        return self._result

    def start(self, request: JobRequest) -> threading.Thread:
        with self._lock:
            if self.running:
                raise RuntimeError("一括処理はすでに実行中です")
            self._done.clear()
            self._result = None
            self._status_text = STATUS_WORKING_TEXT

        if self._scope is not None:
            self._scope.begin()

        self._thread = threading.Thread(
            target=self._run_worker,
            args=(request,),
            daemon=True,
            name="size-transformer-batch",
        )
        self._thread.start()
        return self._thread

    def wait(self, timeout: Optional[float] = None) -> Optional[RunResult]:
        """完了を待って結果を返す。タイムアウト時は ``None``。"""
        if not self._done.wait(timeout):
            return None
        return self._result

    def _run_worker(self, request: JobRequest) -> None:
        try:
            result = self._runner(request)
        except Exception as e:
            logger.exception(f"一括処理中に予期せぬエラーが発生しました: {e}")
            result = RunResult.listing_failed(str(e))
        self._dispatch_completion(result)

    def _dispatch_completion(self, result: RunResult) -> None:
        if self._dispatch is None:
            self._publish(result)
            return
        try:
            self._dispatch(lambda: self._publish(result))
        except Exception as e:
            logger.error(f"完了通知のディスパッチに失敗しました: {e}")
            self._publish(result)

    def _publish(self, result: RunResult) -> None:
        self._result = result
        self._status_text = result.status_text
        try:
            if self._scope is not None:
                self._scope.close(result.status_text)
            if self._on_complete is not None:
                self._on_complete(result)
        finally:
            self._done.set()
