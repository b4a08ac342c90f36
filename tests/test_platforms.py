"""Tests for the platform selector and the discovery strategy chain."""

import pytest

from offmyport.errors import ToolUnavailableError
from offmyport.executor import RunResult
from offmyport.platforms import UnixAdapter, WindowsAdapter, get_adapter
from offmyport.platforms.base import (
    OutcomeKind,
    Strategy,
    StrategyOutcome,
    empty_metadata_map,
    run_listing_command,
    run_strategy_chain,
)
from offmyport.schema import ListeningProcess

from conftest import NOT_FOUND, FixtureExecutor, ok


@pytest.mark.parametrize("platform", ["win32", "cygwin", "darwin", "linux", "freebsd14"])
def test_get_adapter(platform):
    adapter = get_adapter(platform, executor=FixtureExecutor({}))
    expected = WindowsAdapter if platform == "win32" else UnixAdapter
    assert isinstance(adapter, expected)


def test_get_adapter_returns_fresh_instances():
    assert get_adapter("linux") is not get_adapter("linux")


def _listener(pid, port):
    return ListeningProcess(command="x", pid=pid, user="u", port=port)


def test_chain_skips_unavailable():
    seen = []

    def first():
        seen.append("a")
        return StrategyOutcome.unavailable("a")

    def second():
        seen.append("b")
        return StrategyOutcome.succeeded("b", [_listener(1, 80)])

    def third():
        seen.append("c")
        return StrategyOutcome.succeeded("c", [])

    result = run_strategy_chain([Strategy("a", first), Strategy("b", second), Strategy("c", third)])
    assert [p.port for p in result] == [80]
    assert seen == ["a", "b"]


def test_chain_stops_on_failed_tool():
    result = run_strategy_chain([
        Strategy("a", lambda: StrategyOutcome.failed("a")),
        Strategy("b", lambda: StrategyOutcome.succeeded("b", [_listener(1, 80)])),
    ])
    assert result == []


def test_chain_all_unavailable():
    with pytest.raises(ToolUnavailableError) as exc:
        run_strategy_chain([
            Strategy("a", lambda: StrategyOutcome.unavailable("a")),
            Strategy("b", lambda: StrategyOutcome.unavailable("b")),
        ])
    assert str(exc.value) == "Neither a nor b available."


@pytest.mark.parametrize(
    "result,kind",
    [
        (NOT_FOUND, OutcomeKind.UNAVAILABLE),
        (RunResult(stdout="", stderr="permission denied", returncode=1), OutcomeKind.FAILED),
        (ok("data"), OutcomeKind.SUCCEEDED),
    ],
)
def test_run_listing_command_classifies(result, kind):
    executor = FixtureExecutor({("tool",): result})
    outcome = run_listing_command(executor, "tool", ["tool"], lambda out: [_listener(1, 1)])
    assert outcome.kind is kind
    assert len(outcome.processes) == (1 if kind is OutcomeKind.SUCCEEDED else 0)


def test_empty_metadata_map():
    result = empty_metadata_map([3, 1, 3])
    assert list(result) == [3, 1]
    assert all(m.is_empty() for m in result.values())
    assert result[3] is not result[1]
