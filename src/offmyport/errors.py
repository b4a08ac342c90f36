"""Exceptions raised by the platform layer."""

from typing import Sequence


class OffMyPortError(Exception):
    """Base class for offmyport errors."""


class ToolUnavailableError(OffMyPortError):
    """None of the tools needed for port discovery is installed."""

    def __init__(self, tools: Sequence[str], hint: str = "") -> None:
        self.tools = list(tools)
        msg = f"Neither {' nor '.join(self.tools)} available."
        if hint:
            msg = f"{msg} {hint}"
        super().__init__(msg)


class DiscoveryError(OffMyPortError):
    """The discovery query ran but failed and no fallback exists."""
