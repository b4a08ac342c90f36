"""
Shared pieces of the platform adapters: the adapter contract and the
discovery strategy chain.
"""

import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Protocol, Sequence

from ..errors import ToolUnavailableError
from ..executor import Executor, tool_missing
from ..schema import KillSignal, ListeningProcess, ProcessMetadata

_DEBUG = bool(os.environ.get("OFFMYPORT_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[offmyport] platform: {msg}", file=sys.stderr)


class PlatformAdapter(Protocol):
    """Uniform contract implemented by UnixAdapter and WindowsAdapter."""

    def list_listening_processes(self) -> List[ListeningProcess]:
        """All processes listening on TCP ports, unique per (pid, port)."""
        ...

    def get_process_metadata(self, pid: int) -> ProcessMetadata:
        """Metadata for one PID; all fields None when unavailable."""
        ...

    def get_process_metadata_batch(self, pids: Iterable[int]) -> Dict[int, ProcessMetadata]:
        """Metadata for many PIDs with a constant number of tool invocations."""
        ...

    def kill_process(self, pid: int, sig: KillSignal) -> None:
        """Send sig to pid. OS errors propagate to the caller."""
        ...


# --- Discovery strategy chain ---


class OutcomeKind(str, Enum):
    UNAVAILABLE = "unavailable"  # tool not installed: try the next strategy
    SUCCEEDED = "succeeded"
    FAILED = "failed"  # tool ran and failed: stop with no results


@dataclass
class StrategyOutcome:
    tool: str
    kind: OutcomeKind
    processes: List[ListeningProcess] = field(default_factory=list)

    @classmethod
    def unavailable(cls, tool: str) -> "StrategyOutcome":
        return cls(tool=tool, kind=OutcomeKind.UNAVAILABLE)

    @classmethod
    def failed(cls, tool: str) -> "StrategyOutcome":
        return cls(tool=tool, kind=OutcomeKind.FAILED)

    @classmethod
    def succeeded(cls, tool: str, processes: List[ListeningProcess]) -> "StrategyOutcome":
        return cls(tool=tool, kind=OutcomeKind.SUCCEEDED, processes=processes)


@dataclass
class Strategy:
    tool: str
    run: Callable[[], StrategyOutcome]


def run_listing_command(
    executor: Executor,
    tool: str,
    cmd: List[str],
    parse: Callable[[str], List[ListeningProcess]],
) -> StrategyOutcome:
    """Run a listing command and classify the result as a strategy outcome."""
    r = executor(cmd)
    if r.returncode != 0:
        if tool_missing(r):
            _debug(f"{tool} not available (exit {r.returncode})")
            return StrategyOutcome.unavailable(tool)
        # e.g. lsof exits 1 when nothing is listening
        _debug(f"{tool} exited {r.returncode}: {r.stderr.strip()}")
        return StrategyOutcome.failed(tool)
    return StrategyOutcome.succeeded(tool, parse(r.stdout))


def run_strategy_chain(strategies: Sequence[Strategy], hint: str = "") -> List[ListeningProcess]:
    """Run strategies in order; the first one whose tool is present decides the result.

    Raises ToolUnavailableError when every tool is missing.
    """
    for strategy in strategies:
        outcome = strategy.run()
        if outcome.kind is OutcomeKind.UNAVAILABLE:
            continue
        _debug(f"{outcome.tool}: {outcome.kind.value}, {len(outcome.processes)} listener(s)")
        return outcome.processes
    raise ToolUnavailableError([s.tool for s in strategies], hint=hint)


def empty_metadata_map(pids: Iterable[int]) -> Dict[int, ProcessMetadata]:
    """One all-None record per requested PID, so vanished PIDs still have an entry."""
    return {pid: ProcessMetadata() for pid in pids}
