"""
Unix (macOS/Linux) platform adapter.

Port discovery uses lsof with an ss fallback; metadata comes from ps and
lsof, with /proc as the Linux fallback for the working directory.
"""

import os
import sys
from typing import Callable, Dict, Iterable, List, Optional

from ..executor import Executor, make_executor, tool_missing
from ..parsers.lsof import parse_lsof_cwd, parse_lsof_cwd_batch, parse_lsof_listen
from ..parsers.proc import parse_proc_cwd_links
from ..parsers.ps import parse_ps_batch, parse_ps_metadata
from ..parsers.ss import parse_ss_listen
from ..schema import KillSignal, ListeningProcess, ProcessMetadata
from .base import (
    Strategy,
    empty_metadata_map,
    run_listing_command,
    run_strategy_chain,
)

LSOF_LISTEN_CMD = ["lsof", "-iTCP", "-sTCP:LISTEN", "-P", "-n"]
SS_LISTEN_CMD = ["ss", "-tlnp"]
PS_FIELDS = "%cpu=,%mem=,rss=,lstart=,args="

_DEBUG = bool(os.environ.get("OFFMYPORT_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[offmyport] unix: {msg}", file=sys.stderr)


class UnixAdapter:
    """PlatformAdapter for macOS, Linux and other Unix-like systems."""

    def __init__(
        self,
        executor: Optional[Executor] = None,
        kill: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        self._run = executor or make_executor()
        self._kill = kill or os.kill

    # --- Discovery ---

    def list_listening_processes(self) -> List[ListeningProcess]:
        """Try lsof first (macOS, most Linux), then ss (Linux without lsof)."""
        return run_strategy_chain(
            [
                Strategy("lsof", self._try_lsof),
                Strategy("ss", self._try_ss),
            ],
            hint="Install lsof or iproute2.",
        )

    def _try_lsof(self):
        return run_listing_command(self._run, "lsof", LSOF_LISTEN_CMD, parse_lsof_listen)

    def _try_ss(self):
        return run_listing_command(
            self._run,
            "ss",
            SS_LISTEN_CMD,
            lambda out: parse_ss_listen(out, resolve_user=self._process_user),
        )

    def _process_user(self, pid: int) -> Optional[str]:
        """Owner of /proc/PID (Linux)."""
        r = self._run(["stat", "-c", "%U", f"/proc/{pid}"])
        if r.returncode == 0 and r.stdout.strip():
            return r.stdout.strip()
        return None

    # --- Metadata ---

    def get_process_metadata(self, pid: int) -> ProcessMetadata:
        cwd = self._process_cwd(pid)
        # -ww: never cut args to $COLUMNS
        r = self._run(["ps", "-ww", "-p", str(pid), "-o", PS_FIELDS])
        if r.returncode != 0 or not r.stdout.strip():
            _debug(f"ps -p {pid} exited {r.returncode}")
            return ProcessMetadata(cwd=cwd)
        return parse_ps_metadata(r.stdout, cwd=cwd)

    def get_process_metadata_batch(self, pids: Iterable[int]) -> Dict[int, ProcessMetadata]:
        """One ps call, one lsof call and at most one /proc call for all PIDs.

        ps and lsof exit 1 when any requested PID is gone or unreadable but
        still print the rest, so their output is parsed whenever they ran.
        """
        result = empty_metadata_map(pids)
        if not result:
            return result
        pid_list = ",".join(str(pid) for pid in result)

        r = self._run(["ps", "-ww", "-p", pid_list, "-o", f"pid=,{PS_FIELDS}"])
        if r.returncode != 0:
            _debug(f"ps batch exited {r.returncode}")
        if not tool_missing(r):
            for pid, meta in parse_ps_batch(r.stdout).items():
                if pid in result:
                    result[pid] = meta

        cwds: Dict[int, str] = {}
        r = self._run(["lsof", "-a", "-p", pid_list, "-d", "cwd", "-Fpn"])
        if r.returncode != 0:
            _debug(f"lsof cwd batch exited {r.returncode}")
        if not tool_missing(r):
            cwds = parse_lsof_cwd_batch(r.stdout)

        missing = [pid for pid in result if pid not in cwds]
        if missing:
            cwds.update(self._proc_cwds(missing))

        for pid, cwd in cwds.items():
            if pid in result:
                result[pid] = result[pid].model_copy(update={"cwd": cwd})
        return result

    def _process_cwd(self, pid: int) -> Optional[str]:
        r = self._run(["lsof", "-a", "-p", str(pid), "-d", "cwd", "-Fn"])
        if not tool_missing(r):
            cwd = parse_lsof_cwd(r.stdout)
            if cwd:
                return cwd
        return self._proc_cwd(pid)

    def _proc_cwd(self, pid: int) -> Optional[str]:
        """Read the /proc/PID/cwd symlink (Linux only)."""
        r = self._run(["readlink", f"/proc/{pid}/cwd"])
        if r.returncode == 0:
            return r.stdout.strip() or None
        return None

    def _proc_cwds(self, pids: List[int]) -> Dict[int, str]:
        """Read many /proc/PID/cwd symlinks with a single find call (Linux only)."""
        paths = [f"/proc/{pid}/cwd" for pid in pids]
        r = self._run(["find", *paths, "-maxdepth", "0", "-printf", "%p\\t%l\\n"])
        if tool_missing(r):
            return {}
        # find exits 1 for vanished or unreadable PIDs and prints the others
        return parse_proc_cwd_links(r.stdout)

    # --- Termination ---

    def kill_process(self, pid: int, sig: KillSignal) -> None:
        """Deliver the signal directly; PermissionError/ProcessLookupError propagate."""
        self._kill(pid, sig.signum)
