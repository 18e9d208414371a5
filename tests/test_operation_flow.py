from __future__ import annotations

import threading
from pathlib import Path

import pytest

from size_transformer.job_models import JobRequest, RunResult
from size_transformer.operation_flow import (
    BatchOperation,
    DirectoryAccessScope,
    OperationScope,
    OperationScopeHooks,
)


def _recording_hooks(events: list[tuple]) -> OperationScopeHooks:
    return OperationScopeHooks(
        set_controls_enabled=lambda enabled: events.append(("controls", enabled)),
        show_status=lambda text: events.append(("status", text)),
    )


def test_operation_scope_begin_and_close() -> None:
    events: list[tuple] = []
    scope = OperationScope(hooks=_recording_hooks(events))

    scope.begin()
    scope.close("Success (3)")

    assert events == [
        ("controls", False),
        ("status", "Working..."),
        ("status", "Success (3)"),
        ("controls", True),
    ]


def test_operation_scope_is_idempotent() -> None:
    events: list[tuple] = []
    scope = OperationScope(hooks=_recording_hooks(events))

    scope.begin()
    scope.begin()
    scope.close()
    scope.close()

    assert events.count(("controls", False)) == 1
    assert events.count(("controls", True)) == 1
    assert events[-2] == ("status", "Ready")


def test_operation_scope_context_manager_closes_on_error() -> None:
    events: list[tuple] = []
    scope = OperationScope(hooks=_recording_hooks(events))

    with pytest.raises(RuntimeError):
        with scope:
            raise RuntimeError("boom")

    assert scope.active is False
    assert events[-1] == ("controls", True)


def test_directory_access_scope_releases_on_exit(tmp_path: Path) -> None:
    output_dir = tmp_path / "out" / "nested"
    scope = DirectoryAccessScope(tmp_path, output_dir)

    with pytest.raises(ValueError):
        with scope:
            assert scope.active is True
            assert not output_dir.exists()
            scope.ensure_output_dir()
            assert output_dir.is_dir()
            raise ValueError("stop")

    assert scope.active is False


def _request(tmp_path: Path) -> JobRequest:
    return JobRequest(tmp_path, tmp_path / "out", 10, 10)


def test_batch_operation_publishes_result_once(tmp_path: Path) -> None:
    completed: list[RunResult] = []
    events: list[tuple] = []
    expected = RunResult(succeeded=2, failed=0)
    operation = BatchOperation(
        lambda request: expected,
        on_complete=completed.append,
        hooks=_recording_hooks(events),
    )

    assert operation.status_text == "Ready"
    operation.start(_request(tmp_path))
    result = operation.wait(timeout=5)

    assert result == expected
    assert completed == [expected]
    assert operation.status_text == "Success (2)"
    assert operation.running is False
    assert ("status", "Working...") in events
    assert events[-2:] == [("status", "Success (2)"), ("controls", True)]


def test_batch_operation_runs_on_worker_thread(tmp_path: Path) -> None:
    seen: dict[str, object] = {}

    def runner(request: JobRequest) -> RunResult:
        seen["thread"] = threading.current_thread()
        return RunResult()

    operation = BatchOperation(runner)
    operation.start(_request(tmp_path))
    operation.wait(timeout=5)

    assert seen["thread"] is not threading.main_thread()


def test_batch_operation_rejects_concurrent_start(tmp_path: Path) -> None:
    release = threading.Event()

    def runner(request: JobRequest) -> RunResult:
        release.wait(5)
        return RunResult()

    operation = BatchOperation(runner)
    operation.start(_request(tmp_path))
    try:
        assert operation.running is True
        assert operation.status_text == "Working..."
        assert operation.wait(timeout=0.01) is None
        with pytest.raises(RuntimeError):
            operation.start(_request(tmp_path))
    finally:
        release.set()
    assert operation.wait(timeout=5) == RunResult()


def test_batch_operation_uses_dispatch(tmp_path: Path) -> None:
    dispatched: list = []
    completed: list[RunResult] = []

    operation = BatchOperation(
        lambda request: RunResult(succeeded=1),
        on_complete=completed.append,
        dispatch=dispatched.append,
    )
    operation.start(_request(tmp_path)).join(timeout=5)

    assert completed == []
    assert len(dispatched) == 1

    dispatched[0]()
    assert completed == [RunResult(succeeded=1)]
    assert operation.wait(timeout=0) == RunResult(succeeded=1)


def test_batch_operation_turns_runner_crash_into_error(tmp_path: Path) -> None:
    def runner(request: JobRequest) -> RunResult:
        raise RuntimeError("unexpected")

    operation = BatchOperation(runner)
    operation.start(_request(tmp_path))
    result = operation.wait(timeout=5)

    assert result is not None
    assert result.status_text == "Error"
    assert "unexpected" in result.error
