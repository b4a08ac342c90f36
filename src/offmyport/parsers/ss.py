"""ss parser: `ss -tlnp` listening sockets with embedded process info."""

import re
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from ..schema import UNKNOWN_USER, ListeningProcess
from . import _debug, dedupe_listeners, extract_port

# users:(("node",pid=1234,fd=20),("node",pid=1235,fd=20))
_USER_ENTRY_RE = re.compile(r'\("([^"]+)",pid=(\d+)')

UserResolver = Callable[[int], Optional[str]]


def parse_ss_listen(stdout: str, resolve_user: Optional[UserResolver] = None) -> List[ListeningProcess]:
    """Parse `ss -tlnp` output.

    Example line:
        LISTEN 0  511  0.0.0.0:3000  0.0.0.0:*  users:(("node",pid=1234,fd=20))

    ss does not report the owning user; resolve_user(pid) is asked once per pid
    and "unknown" is used when it returns nothing.
    """
    processes: List[ListeningProcess] = []
    users: Dict[int, str] = {}
    for line in stdout.splitlines():
        if not line.startswith("LISTEN"):
            continue
        parts = line.split()
        if len(parts) < 4:
            continue
        port = extract_port(parts[3])
        if port is None:
            continue
        idx = line.find("users:((")
        if idx < 0:
            # Process info is hidden for sockets owned by other users unless run as root
            continue
        for command, pid_str in _USER_ENTRY_RE.findall(line[idx:]):
            pid = int(pid_str)
            if pid <= 0:
                continue
            if pid not in users:
                users[pid] = (resolve_user(pid) if resolve_user else None) or UNKNOWN_USER
            try:
                processes.append(
                    ListeningProcess(command=command, pid=pid, user=users[pid], port=port, protocol="TCP")
                )
            except ValidationError as exc:
                _debug(f"ss: skipping {line!r}: {exc.error_count()} invalid field(s)")
    return dedupe_listeners(processes)
