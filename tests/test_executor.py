"""Tests for the command executor and not-installed detection."""

import subprocess

from offmyport.executor import RunResult, make_executor, subprocess_executor, tool_missing


def test_tool_missing_exit_127():
    assert tool_missing(RunResult(stdout="", stderr="", returncode=127))


def test_tool_missing_stderr_marker():
    r = RunResult(stdout="", stderr="sh: 1: lsof: not found", returncode=2)
    assert tool_missing(r)


def test_tool_missing_stderr_marker_case_insensitive():
    r = RunResult(stdout="", stderr="Command Not Found", returncode=1)
    assert tool_missing(r)


def test_tool_failed_is_not_missing():
    r = RunResult(stdout="", stderr="lsof: WARNING: can't stat() fuse", returncode=1)
    assert not tool_missing(r)


def test_success_is_never_missing():
    # stdout/stderr content is irrelevant when the tool succeeded
    r = RunResult(stdout="", stderr="file not found", returncode=0)
    assert not tool_missing(r)


def test_subprocess_executor_missing_binary(monkeypatch):
    def boom(*args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr(subprocess, "run", boom)
    r = subprocess_executor(["definitely-not-installed"])
    assert r.returncode == 127
    assert tool_missing(r)


def test_subprocess_executor_captures_output(monkeypatch):
    captured = {}

    def fake_run(cmd, **kwargs):
        captured["cmd"] = cmd
        captured["kwargs"] = kwargs
        return subprocess.CompletedProcess(cmd, 3, stdout="out", stderr=None)

    monkeypatch.setattr(subprocess, "run", fake_run)
    r = subprocess_executor(["ps", "-p", "1"])
    assert r == RunResult(stdout="out", stderr="", returncode=3)
    assert captured["cmd"] == ["ps", "-p", "1"]
    assert captured["kwargs"]["capture_output"] is True
    assert captured["kwargs"]["text"] is True
    assert "timeout" not in captured["kwargs"]


def test_make_executor_default():
    assert make_executor() is subprocess_executor
