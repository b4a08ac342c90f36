"""
PowerShell parsers: `ConvertTo-Json -Compress` documents.

ConvertTo-Json collapses a one-element pipeline into a bare object, so every
document is normalised to a list of objects first. Empty or "null" output
means no rows.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..schema import UNKNOWN_USER, ListeningProcess, ProcessMetadata
from . import _debug, dedupe_listeners


def load_items(stdout: str) -> List[Dict[str, Any]]:
    """JSON document to a list of objects. Raises json.JSONDecodeError on bad input."""
    text = stdout.strip()
    if not text or text == "null":
        return []
    data = json.loads(text)
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    return []


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def parse_listeners(stdout: str) -> List[ListeningProcess]:
    """Parse [{Port, PID, Name, User}, ...] from the listener query."""
    try:
        items = load_items(stdout)
    except json.JSONDecodeError as exc:
        _debug(f"powershell: invalid listener JSON: {exc}")
        return []

    processes: List[ListeningProcess] = []
    for item in items:
        pid = _as_int(item.get("PID"))
        port = _as_int(item.get("Port"))
        if pid is None or port is None:
            continue
        try:
            processes.append(
                ListeningProcess(
                    command=_as_str(item.get("Name")) or "unknown",
                    pid=pid,
                    user=_as_str(item.get("User")) or UNKNOWN_USER,
                    port=port,
                    protocol="TCP",
                )
            )
        except ValidationError as exc:
            _debug(f"powershell: skipping {item!r}: {exc.error_count()} invalid field(s)")
    return dedupe_listeners(processes)


def metadata_from_item(item: Dict[str, Any]) -> ProcessMetadata:
    memory = _as_float(item.get("Memory"))
    return ProcessMetadata(
        cpu_percent=_as_float(item.get("CPU")),
        memory_bytes=int(memory) if memory is not None else None,
        start_time=_as_str(item.get("StartTime")),
        path=_as_str(item.get("Path")),
        cwd=_as_str(item.get("Cwd")),
    )


def parse_metadata(stdout: str) -> ProcessMetadata:
    """Parse the single-PID metadata object; "{}" means the process is gone."""
    try:
        items = load_items(stdout)
    except json.JSONDecodeError as exc:
        _debug(f"powershell: invalid metadata JSON: {exc}")
        return ProcessMetadata()
    if not items:
        return ProcessMetadata()
    return metadata_from_item(items[0])


def parse_metadata_batch(stdout: str) -> Dict[int, ProcessMetadata]:
    """Parse [{PID, CPU, Memory, StartTime, Path, Cwd}, ...] keyed by PID."""
    try:
        items = load_items(stdout)
    except json.JSONDecodeError as exc:
        _debug(f"powershell: invalid batch JSON: {exc}")
        return {}
    result: Dict[int, ProcessMetadata] = {}
    for item in items:
        pid = _as_int(item.get("PID"))
        if pid is None:
            continue
        result[pid] = metadata_from_item(item)
    return result
