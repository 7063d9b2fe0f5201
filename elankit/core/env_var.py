"""
Environment variable contract shared between elankit and the processes it spawns.

The recursion counter is read once from the inherited environment when the
configuration is built and then passed around explicitly; the environment
variable is only how the value travels to child processes.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

ELAN_HOME = "ELAN_HOME"
ELAN_TOOLCHAIN = "ELAN_TOOLCHAIN"
LEAN_RECURSION_COUNT = "LEAN_RECURSION_COUNT"

# Depth at which falling back to a bare PATH lookup is refused
LEAN_RECURSION_COUNT_MAX = 5


def read_recursion_count(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Read the inherited recursion depth.

    Absent or unparseable values count as 0.

    Example:
        >>> read_recursion_count({"LEAN_RECURSION_COUNT": "3"})
        3
        >>> read_recursion_count({"LEAN_RECURSION_COUNT": "many"})
        0
    """
    if environ is None:
        environ = os.environ

    value = environ.get(LEAN_RECURSION_COUNT)
    if value is None:
        return 0
    try:
        return int(value)
    except ValueError:
        logger.debug(f"Ignoring unparseable {LEAN_RECURSION_COUNT}={value!r}")
        return 0


def prepend_path(command, name: str, entries: Iterable[Path]) -> None:
    """
    Prepend entries to a search-path style variable of a command.

    The current value is taken from the command's environment and kept
    verbatim after the new entries, so repeated calls stack in call order and
    empty entries (the current directory on POSIX) survive.
    """
    parts = [str(entry) for entry in entries]
    if not parts:
        return

    current = command.get_env(name)
    if current:
        parts.append(current)

    command.set_env(name, os.pathsep.join(parts))


def set_recursion_count(command, depth: int) -> None:
    """Hand the incremented recursion depth to the spawned process."""
    command.set_env(LEAN_RECURSION_COUNT, str(depth + 1))


__all__ = [
    "ELAN_HOME",
    "ELAN_TOOLCHAIN",
    "LEAN_RECURSION_COUNT",
    "LEAN_RECURSION_COUNT_MAX",
    "read_recursion_count",
    "prepend_path",
    "set_recursion_count",
]
