"""
Platform adapters. Callers get one adapter from get_adapter() at startup and
pass it around; nothing outside this package branches on the OS.
"""

import sys
from typing import Optional

from ..executor import Executor
from .base import PlatformAdapter
from .unix import UnixAdapter
from .windows import WindowsAdapter


def get_adapter(platform: Optional[str] = None, executor: Optional[Executor] = None) -> PlatformAdapter:
    """Return the adapter for an OS identifier (sys.platform by default).

    - Windows ("win32"): WindowsAdapter
    - Others (darwin, linux, BSDs): UnixAdapter
    """
    platform = platform or sys.platform
    if platform.startswith("win"):
        return WindowsAdapter(executor=executor)
    return UnixAdapter(executor=executor)


__all__ = ["PlatformAdapter", "UnixAdapter", "WindowsAdapter", "get_adapter"]
