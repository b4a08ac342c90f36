"""
Process schema.

Typed contract between the platform adapters and the front end.
Every adapter produces these models; the CLI and the JSON report consume them.
"""

import signal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


UNKNOWN_USER = "unknown"


# --- Discovery ---


class ListeningProcess(BaseModel):
    """One process holding a TCP socket in LISTEN state."""

    command: str  # may be truncated by the source tool
    pid: int = Field(gt=0)
    user: str = UNKNOWN_USER
    port: int = Field(ge=1, le=65535)
    protocol: str = "TCP"

    @property
    def key(self) -> tuple:
        return (self.pid, self.port)


# --- Metadata ---


class ProcessMetadata(BaseModel):
    """Point-in-time details for a PID. None means unknown, never zero."""

    cpu_percent: Optional[float] = None
    memory_bytes: Optional[int] = None
    start_time: Optional[str] = None  # ISO-8601, or the raw tool string
    path: Optional[str] = None
    cwd: Optional[str] = None

    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


# --- Termination ---


class KillSignal(str, Enum):
    TERM = "SIGTERM"  # gentle, allows cleanup
    KILL = "SIGKILL"  # forced, immediate

    @property
    def signum(self) -> Optional[int]:
        """Numeric signal on this platform, or None (Windows has no SIGKILL)."""
        sig = getattr(signal, self.value, None)
        return int(sig) if sig is not None else None


# --- Output ---


class ProcessJsonOutput(BaseModel):
    """Record emitted by --json: listener fields plus metadata, camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    pid: int
    name: str
    port: int
    protocol: str
    user: str
    cpu_percent: Optional[float] = None
    memory_bytes: Optional[int] = None
    start_time: Optional[str] = None
    path: Optional[str] = None
    cwd: Optional[str] = None
