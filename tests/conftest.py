from pathlib import Path
from typing import Dict, List, Tuple

from offmyport.executor import RunResult

FIXTURES = Path(__file__).parent / "fixtures"

NOT_FOUND = RunResult(stdout="", stderr="Command not found", returncode=127)


class FixtureExecutor:
    """Executor that answers known commands from a table and records every call.

    Keys are tuples of leading argv items; the longest matching prefix wins.
    Unknown commands fail with exit 1.
    """

    def __init__(self, responses: Dict[Tuple[str, ...], RunResult]):
        self.responses = responses
        self.calls: List[List[str]] = []

    def __call__(self, cmd):
        self.calls.append(list(cmd))
        best = None
        for prefix, result in self.responses.items():
            if tuple(cmd[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best[0])):
                best = (prefix, result)
        if best:
            return best[1]
        return RunResult(stdout="", stderr="unknown command", returncode=1)

    def calls_to(self, tool: str) -> List[List[str]]:
        return [c for c in self.calls if c and c[0] == tool]


def ok(stdout: str) -> RunResult:
    return RunResult(stdout=stdout, stderr="", returncode=0)


def fixture_text(name: str) -> str:
    return (FIXTURES / name).read_text()
