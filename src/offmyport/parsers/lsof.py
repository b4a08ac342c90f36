"""lsof parsers: listening sockets (-iTCP -sTCP:LISTEN) and process cwd (-Fn / -Fpn)."""

from typing import Dict, List, Optional

from pydantic import ValidationError

from ..schema import ListeningProcess
from . import _debug, dedupe_listeners, extract_port

# COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME
_MIN_FIELDS = 9


def _address_field(parts: List[str]) -> str:
    """NAME column: last token, ignoring a trailing state marker like '(LISTEN)'."""
    tokens = parts[_MIN_FIELDS - 1:]
    if len(tokens) > 1 and tokens[-1].startswith("(") and tokens[-1].endswith(")"):
        tokens = tokens[:-1]
    return tokens[-1]


def parse_lsof_listen(stdout: str) -> List[ListeningProcess]:
    """Parse `lsof -iTCP -sTCP:LISTEN -P -n` output.

    Example line:
        node    123 alice   45u  IPv4 0x1234      0t0  TCP 127.0.0.1:3000 (LISTEN)
    """
    processes: List[ListeningProcess] = []
    lines = stdout.splitlines()[1:]  # header
    for line in lines:
        if not line.strip():
            continue
        parts = line.split()
        if len(parts) < _MIN_FIELDS:
            continue
        command, pid_str, user = parts[0], parts[1], parts[2]
        if not pid_str.isdigit():
            continue
        port = extract_port(_address_field(parts))
        if port is None:
            continue
        try:
            processes.append(
                ListeningProcess(command=command, pid=int(pid_str), user=user, port=port, protocol="TCP")
            )
        except ValidationError as exc:
            _debug(f"lsof: skipping {line!r}: {exc.error_count()} invalid field(s)")
    return dedupe_listeners(processes)


def parse_lsof_cwd(stdout: str) -> Optional[str]:
    """First name field of `lsof -a -p PID -d cwd -Fn` ("p123\\nfcwd\\nn/path")."""
    for line in stdout.splitlines():
        if line.startswith("n") and len(line) > 1:
            return line[1:]
    return None


def parse_lsof_cwd_batch(stdout: str) -> Dict[int, str]:
    """Parse `lsof -a -p 1,2 -d cwd -Fpn`: 'p' lines open a process, 'n' lines carry its cwd."""
    result: Dict[int, str] = {}
    current: Optional[int] = None
    for line in stdout.splitlines():
        if not line:
            continue
        tag, value = line[0], line[1:]
        if tag == "p":
            current = int(value) if value.isdigit() else None
        elif tag == "n" and current is not None and value and current not in result:
            result[current] = value
    return result
