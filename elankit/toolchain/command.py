"""
elankit/toolchain/command.py

Subprocess invocations for toolchain binaries.

A `Command` is a value object: program, arguments and environment
overrides layered over a snapshot of the inherited environment. The
toolchain core only builds commands; spawning, waiting and signal
handling belong to the caller (see `Command.run` and `Command.popen`).
"""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from ..core import env_var
from ..core.platform_capabilities import PlatformCapabilities

logger = logging.getLogger(__name__)


@dataclass
class Command:
    """
    A process invocation that has not been started yet.

    Attributes:
        program: Executable path, or a bare name resolved through PATH
        args: Arguments after the program
        env: Variables set for the child on top of the inherited environment
        inherited: Snapshot of the environment the child starts from
    """

    program: Union[str, Path]
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    inherited: Dict[str, str] = field(default_factory=lambda: dict(os.environ))

    def arg(self, *args: str) -> "Command":
        self.args.extend(str(a) for a in args)
        return self

    def set_env(self, name: str, value: Union[str, Path]) -> "Command":
        self.env[name] = str(value)
        return self

    def get_env(self, name: str) -> Optional[str]:
        """Value the child will see for name."""
        if name in self.env:
            return self.env[name]
        return self.inherited.get(name)

    def environment(self) -> Dict[str, str]:
        """Complete environment for the child process."""
        merged = dict(self.inherited)
        merged.update(self.env)
        return merged

    def argv(self) -> List[str]:
        return [str(self.program), *self.args]

    def run(self, **kwargs) -> subprocess.CompletedProcess:
        """Spawn and wait; keyword arguments go to subprocess.run."""
        logger.debug(f"Running {' '.join(self.argv())}")
        return subprocess.run(self.argv(), env=self.environment(), **kwargs)

    def popen(self, **kwargs) -> subprocess.Popen:
        """Spawn without waiting; keyword arguments go to subprocess.Popen."""
        logger.debug(f"Spawning {' '.join(self.argv())}")
        return subprocess.Popen(self.argv(), env=self.environment(), **kwargs)


def set_ldpath(
    command: Command,
    toolchain_path: Path,
    elan_dir: Path,
    platform: PlatformCapabilities,
) -> None:
    """
    Point the loader and PATH at the toolchain.

    The toolchain's lib directory goes first on the loader path. The proxy
    bin directory goes first on PATH so nested invocations of lean or
    leanpkg dispatch through elan; there is no fallback when the proxies
    are absent.
    """
    env_var.prepend_path(command, platform.loader_path_var, [toolchain_path / "lib"])

    path_entries = [elan_dir / "bin"]
    if platform.prepend_toolchain_bin:
        path_entries.append(toolchain_path / "bin")

    env_var.prepend_path(command, "PATH", path_entries)


def set_env(
    command: Command,
    toolchain_name: str,
    toolchain_path: Path,
    elan_dir: Path,
    platform: PlatformCapabilities,
    recursion_count: int,
) -> None:
    """
    Apply the environment every toolchain command receives.

    ELAN_HOME is set explicitly because elan and the toolchain's own tools
    do not discover the home directory the same way on every platform.
    """
    set_ldpath(command, toolchain_path, elan_dir, platform)
    env_var.set_recursion_count(command, recursion_count)
    command.set_env(env_var.ELAN_TOOLCHAIN, toolchain_name)
    command.set_env(env_var.ELAN_HOME, elan_dir)


def new_command(
    program: Union[str, Path], inherited: Optional[Mapping[str, str]] = None
) -> Command:
    """Create a command, snapshotting the current environment by default."""
    if inherited is None:
        return Command(program)
    return Command(program, inherited=dict(inherited))


__all__ = ["Command", "new_command", "set_env", "set_ldpath"]
