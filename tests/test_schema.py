"""Tests for the schema models."""

import pytest
from pydantic import ValidationError

from offmyport.report import format_row, no_match_message, to_json_output
from offmyport.schema import KillSignal, ListeningProcess, ProcessMetadata


def test_listening_process_defaults():
    p = ListeningProcess(command="node", pid=1, port=3000)
    assert p.user == "unknown"
    assert p.protocol == "TCP"
    assert p.key == (1, 3000)


@pytest.mark.parametrize("pid,port", [(0, 80), (-1, 80), (1, 0), (1, 65536)])
def test_listening_process_rejects_invalid(pid, port):
    with pytest.raises(ValidationError):
        ListeningProcess(command="x", pid=pid, port=port)


def test_metadata_all_absent_by_default():
    assert ProcessMetadata().is_empty()
    assert not ProcessMetadata(cpu_percent=0.0).is_empty()


def test_kill_signal_values():
    assert [s.value for s in KillSignal] == ["SIGTERM", "SIGKILL"]
    assert KillSignal("SIGKILL") is KillSignal.KILL


def test_json_output_camel_case():
    p = ListeningProcess(command="node", pid=42, user="alice", port=3000)
    meta = ProcessMetadata(cpu_percent=1.5, memory_bytes=2048, cwd="/srv")
    data = to_json_output(p, meta).model_dump(by_alias=True)
    assert data == {
        "pid": 42,
        "name": "node",
        "port": 3000,
        "protocol": "TCP",
        "user": "alice",
        "cpuPercent": 1.5,
        "memoryBytes": 2048,
        "startTime": None,
        "path": None,
        "cwd": "/srv",
    }


def test_format_row():
    p = ListeningProcess(command="node", pid=42, user="alice", port=80)
    assert format_row(p) == "Port    80 │ node            │ PID 42 │ alice"


def test_no_match_message():
    assert no_match_message([3000]) == "No process found listening on port 3000"
    assert no_match_message([80, 443]) == "No process found listening on ports 80, 443"
    assert no_match_message(None) == "No listening TCP processes found"
