"""Text rows and the --json document for listening processes."""

import json
from typing import Dict, List, Optional

from .platforms import PlatformAdapter
from .schema import ListeningProcess, ProcessJsonOutput, ProcessMetadata


def format_row(p: ListeningProcess) -> str:
    return f"Port {p.port:>5} │ {p.command:<15} │ PID {p.pid} │ {p.user}"


def to_json_output(p: ListeningProcess, meta: Optional[ProcessMetadata] = None) -> ProcessJsonOutput:
    meta = meta or ProcessMetadata()
    return ProcessJsonOutput(
        pid=p.pid,
        name=p.command,
        port=p.port,
        protocol=p.protocol,
        user=p.user,
        cpu_percent=meta.cpu_percent,
        memory_bytes=meta.memory_bytes,
        start_time=meta.start_time,
        path=meta.path,
        cwd=meta.cwd,
    )


def render_json(adapter: PlatformAdapter, processes: List[ListeningProcess]) -> str:
    """Pretty-printed JSON array; metadata is fetched with one batch call."""
    metadata: Dict[int, ProcessMetadata] = {}
    if processes:
        metadata = adapter.get_process_metadata_batch([p.pid for p in processes])
    records = [to_json_output(p, metadata.get(p.pid)).model_dump(by_alias=True) for p in processes]
    return json.dumps(records, indent=2, ensure_ascii=False)


def no_match_message(filter_ports: Optional[List[int]]) -> str:
    if filter_ports:
        if len(filter_ports) == 1:
            return f"No process found listening on port {filter_ports[0]}"
        return f"No process found listening on ports {', '.join(str(p) for p in filter_ports)}"
    return "No listening TCP processes found"
