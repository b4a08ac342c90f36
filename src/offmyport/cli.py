"""
Command-line flags and port specifications.
"""

import argparse
import re
from typing import List, Optional

from . import __version__

_DIGITS = re.compile(r"^\d+$")


class PortSpecError(ValueError):
    """Invalid port specification on the command line."""


def _check_range(value: int, segment: str) -> None:
    if value < 1 or value > 65535:
        raise PortSpecError(f"Port out of range (1-65535): {segment}")


def parse_ports(spec: str) -> List[int]:
    """Parse "80", "80,443", "3000-3005" or any comma-separated mix.

    Returns the ports deduplicated and sorted.
    """
    ports = set()
    for segment in (s.strip() for s in spec.split(",")):
        if not segment:
            continue
        if "-" in segment:
            start_str, _, end_str = (x.strip() for x in segment.partition("-"))
            if not _DIGITS.match(start_str) or not _DIGITS.match(end_str):
                raise PortSpecError(f"Invalid port range: {segment}")
            start, end = int(start_str), int(end_str)
            if start > end:
                raise PortSpecError(f"Invalid port range (start > end): {segment}")
            _check_range(start, segment)
            _check_range(end, segment)
            ports.update(range(start, end + 1))
        else:
            if not _DIGITS.match(segment):
                raise PortSpecError(f"Invalid port number: {segment}")
            port = int(segment)
            _check_range(port, segment)
            ports.add(port)
    return sorted(ports)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="offmyport",
        description="Find and kill processes listening on TCP ports.",
        epilog=(
            "examples: offmyport 3000 | offmyport 80,443,3000-3005 | "
            "offmyport 3000 --kill --force | offmyport --json"
        ),
    )
    parser.add_argument(
        "ports",
        nargs="?",
        default=None,
        help="Ports to filter: single (3000), list (80,443), range (3000-3005) or a mix",
    )
    parser.add_argument(
        "-k", "--kill",
        action="store_true",
        help="Kill matching processes (with confirmation)",
    )
    parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Skip confirmation prompt (use with --kill)",
    )
    parser.add_argument(
        "--murder",
        action="store_true",
        help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output process info as JSON (no prompts)",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args(argv)
    # --murder implies --kill --force and uses SIGKILL
    if args.murder:
        args.kill = True
        args.force = True
    return args
