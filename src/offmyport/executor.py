"""
Command execution abstraction.

Adapters never call subprocess directly. They use the provided executor
so that tests can inject fixture output instead of running real commands.
"""

from dataclasses import dataclass
from typing import List, Protocol

NOT_FOUND_EXIT = 127


@dataclass
class RunResult:
    """Result of running a command (or reading a fixture)."""

    stdout: str
    stderr: str
    returncode: int


class Executor(Protocol):
    """Protocol for command execution. Implementations may run commands or return fixtures."""

    def __call__(self, cmd: List[str]) -> RunResult:
        """Execute command to completion. Returns stdout, stderr, returncode."""
        ...


def subprocess_executor(cmd: List[str]) -> RunResult:
    """Default implementation: run the command via subprocess, no timeout."""
    import subprocess
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
        )
        return RunResult(
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )
    except FileNotFoundError:
        return RunResult(stdout="", stderr="Command not found", returncode=NOT_FOUND_EXIT)


def make_executor() -> Executor:
    """Create the default executor."""
    return subprocess_executor


def tool_missing(result: RunResult) -> bool:
    """True when the command could not be started because the tool is not installed.

    Shells report a missing executable either as exit 127 or with a
    "not found" message on stderr; both are checked.
    """
    if result.returncode == 0:
        return False
    return result.returncode == NOT_FOUND_EXIT or "not found" in result.stderr.lower()
