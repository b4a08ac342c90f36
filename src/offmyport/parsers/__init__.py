"""
Parsers turn raw tool output into schema objects.

One module per tool: lsof, ss, ps (Unix) and powershell (Windows).
Parsers are pure: they take stdout text and never run commands themselves.
Malformed lines and fields are skipped or left as None, never raised.
"""

import os
import re
import sys
from typing import Iterable, List, Optional

from ..schema import ListeningProcess

_DEBUG = bool(os.environ.get("OFFMYPORT_DEBUG", ""))

# Trailing ":3000" of "127.0.0.1:3000", "[::1]:3000", "*:3000"
_PORT_RE = re.compile(r":(\d+)$")


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[offmyport] parse: {msg}", file=sys.stderr)


def extract_port(address: str) -> Optional[int]:
    """Port from a host:port address, or None for wildcards like *:*."""
    m = _PORT_RE.search(address)
    if not m:
        return None
    return int(m.group(1))


def parse_decimal(value: str) -> Optional[float]:
    """Parse a number that may use ',' as decimal separator (locale dependent)."""
    try:
        return float(value.strip().replace(",", "."))
    except (ValueError, AttributeError):
        return None


def dedupe_listeners(processes: Iterable[ListeningProcess]) -> List[ListeningProcess]:
    """Keep the first entry per (pid, port); a process may hold several fds on one port."""
    seen = set()
    result = []
    for p in processes:
        if p.key in seen:
            continue
        seen.add(p.key)
        result.append(p)
    return result
