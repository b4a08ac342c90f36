"""
ps parser: `ps -o %cpu=,%mem=,rss=,lstart=,args=` metadata lines.

Output varies by locale:
    "0.0  0.1  12345 Mon Jan  1 12:00:00 2025     /usr/bin/node server.js"
    "0,0  0,1  12345 ons 31 des 06:04:50 2025     /usr/bin/node server.js"

lstart is "Day Mon DD HH:MM:SS YYYY" and is followed by the full command line.
The boundary between the two is only recognisable by the 4-digit year.
"""

import re
from datetime import datetime, timezone
from typing import Dict, Optional

from ..schema import ProcessMetadata
from . import _debug, parse_decimal

LSTART_FORMAT = "%a %b %d %H:%M:%S %Y"

# year token followed by 2+ spaces, then the command line
_ARGS_AFTER_YEAR_RE = re.compile(r"(?<!\S)\d{4}\s{2,}(\S.*)$")
# pid= prefix of a batch line
_BATCH_LINE_RE = re.compile(r"^\s*(\d+)\s+(.*)$")


def parse_lstart(value: str) -> Optional[str]:
    """lstart string to an ISO-8601 UTC timestamp; the raw string if it cannot be parsed."""
    if not value:
        return None
    try:
        local = datetime.strptime(value, LSTART_FORMAT)
    except ValueError:
        # Non-English month/day names
        return value
    return local.astimezone(timezone.utc).isoformat()


def _parse_args(line: str, tokens) -> Optional[str]:
    m = _ARGS_AFTER_YEAR_RE.search(line)
    if m:
        return m.group(1).strip() or None
    # procps separates lstart and args by a single space
    if len(tokens) > 8 and re.fullmatch(r"\d{4}", tokens[7]):
        rest = re.match(r"\s*(?:\S+\s+){8}(.*)$", line)
        if rest:
            return rest.group(1).strip() or None
    return None


def parse_ps_line(line: str, cwd: Optional[str] = None) -> ProcessMetadata:
    """Parse one `%cpu= %mem= rss= lstart= args=` line. Each field fails on its own."""
    line = line.strip()
    if not line:
        return ProcessMetadata(cwd=cwd)
    tokens = line.split()

    cpu_percent = parse_decimal(tokens[0])

    memory_bytes = None
    if len(tokens) > 2:
        rss = tokens[2]
        if rss.isdigit():
            memory_bytes = int(rss) * 1024  # KiB
        else:
            _debug(f"ps: unparsable rss {rss!r}")

    start_time = None
    if len(tokens) >= 8:
        start_time = parse_lstart(" ".join(tokens[3:8]))

    return ProcessMetadata(
        cpu_percent=cpu_percent,
        memory_bytes=memory_bytes,
        start_time=start_time,
        path=_parse_args(line, tokens),
        cwd=cwd,
    )


def parse_ps_metadata(stdout: str, cwd: Optional[str] = None) -> ProcessMetadata:
    """Single-PID output: the first non-empty line."""
    for line in stdout.splitlines():
        if line.strip():
            return parse_ps_line(line, cwd=cwd)
    return ProcessMetadata(cwd=cwd)


def parse_ps_batch(stdout: str) -> Dict[int, ProcessMetadata]:
    """Multi-PID output with a leading pid= column; keyed by pid."""
    result: Dict[int, ProcessMetadata] = {}
    for line in stdout.splitlines():
        m = _BATCH_LINE_RE.match(line)
        if not m:
            continue
        result[int(m.group(1))] = parse_ps_line(m.group(2))
    return result
