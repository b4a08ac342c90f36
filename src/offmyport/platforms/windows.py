"""
Windows platform adapter.

Uses PowerShell for port discovery and process metadata, and taskkill as the
termination fallback. Scripts are Jinja2 templates rendered per call.
"""

import errno
import os
import sys
from typing import Callable, Dict, Iterable, List, Optional

from jinja2 import Environment

from ..errors import DiscoveryError
from ..executor import Executor, make_executor
from ..parsers.powershell import parse_listeners, parse_metadata, parse_metadata_batch
from ..schema import KillSignal, ListeningProcess, ProcessMetadata
from .base import empty_metadata_map

_DEBUG = bool(os.environ.get("OFFMYPORT_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[offmyport] windows: {msg}", file=sys.stderr)


_ENV = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)

LISTENERS_SCRIPT = _ENV.from_string("""
Get-NetTCPConnection -State Listen -ErrorAction SilentlyContinue |
ForEach-Object {
  $proc = Get-Process -Id $_.OwningProcess -ErrorAction SilentlyContinue
  [PSCustomObject]@{
    Port = $_.LocalPort
    PID = $_.OwningProcess
    Name = if ($proc) { $proc.ProcessName } else { "unknown" }
    User = try { (Get-Process -Id $_.OwningProcess -IncludeUserName -ErrorAction SilentlyContinue).UserName } catch { "unknown" }
  }
} | ConvertTo-Json -Compress
""")

# One object per process; $PID is a read-only automatic variable, hence $procId.
_METADATA_OBJECT = """
{% macro metadata_object(id_var) %}
  $p = Get-Process -Id {{ id_var }} -ErrorAction SilentlyContinue
  if ($p) {
    $cim = Get-CimInstance Win32_Process -Filter "ProcessId = {{ id_var }}" -ErrorAction SilentlyContinue
    [PSCustomObject]@{
      PID = $p.Id
      CPU = $p.CPU
      Memory = $p.WorkingSet64
      StartTime = if ($p.StartTime) { $p.StartTime.ToString("o") } else { $null }
      Path = $p.Path
      Cwd = if ($cim -and $cim.ExecutablePath) { Split-Path -Parent $cim.ExecutablePath } else { $null }
    }
  }
{% endmacro %}
"""

METADATA_SCRIPT = _ENV.from_string(_METADATA_OBJECT + """
$result = & {
{{ metadata_object(pid) }}
}
if ($result) { $result | ConvertTo-Json -Compress } else { "{}" }
""")

METADATA_BATCH_SCRIPT = _ENV.from_string(_METADATA_OBJECT + """
$results = @(foreach ($procId in @({{ pids | join(",") }})) {
{{ metadata_object("$procId") }}
})
ConvertTo-Json -InputObject $results -Compress
""")


def powershell_command(script: str) -> List[str]:
    return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]


class WindowsAdapter:
    """PlatformAdapter for Windows."""

    def __init__(
        self,
        executor: Optional[Executor] = None,
        kill: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        self._run = executor or make_executor()
        self._kill = kill or os.kill

    def list_listening_processes(self) -> List[ListeningProcess]:
        """Query Get-NetTCPConnection; there is no fallback tool on Windows."""
        r = self._run(powershell_command(LISTENERS_SCRIPT.render()))
        if r.returncode != 0:
            raise DiscoveryError(
                f"Failed to query listening ports via PowerShell (exit {r.returncode}): {r.stderr.strip()}"
            )
        return parse_listeners(r.stdout)

    def get_process_metadata(self, pid: int) -> ProcessMetadata:
        r = self._run(powershell_command(METADATA_SCRIPT.render(pid=int(pid))))
        if r.returncode != 0:
            _debug(f"metadata query for {pid} exited {r.returncode}")
            return ProcessMetadata()
        return parse_metadata(r.stdout)

    def get_process_metadata_batch(self, pids: Iterable[int]) -> Dict[int, ProcessMetadata]:
        """Single PowerShell invocation for all PIDs."""
        result = empty_metadata_map(int(pid) for pid in pids)
        if not result:
            return result
        r = self._run(powershell_command(METADATA_BATCH_SCRIPT.render(pids=list(result))))
        if r.returncode != 0:
            _debug(f"batch metadata query exited {r.returncode}")
            return result
        for pid, meta in parse_metadata_batch(r.stdout).items():
            if pid in result:
                result[pid] = meta
        return result

    def kill_process(self, pid: int, sig: KillSignal) -> None:
        """os.kill first, taskkill as fallback. A taskkill failure re-raises the original error."""
        try:
            signum = sig.signum
            if signum is None:
                raise OSError(errno.EINVAL, f"{sig.value} is not supported on this platform")
            self._kill(pid, signum)
        except OSError as err:
            cmd = ["taskkill", "/PID", str(pid)]
            if sig is KillSignal.KILL:
                cmd.append("/F")
            r = self._run(cmd)
            if r.returncode != 0:
                _debug(f"taskkill exited {r.returncode}: {r.stderr.strip()}")
                raise err
