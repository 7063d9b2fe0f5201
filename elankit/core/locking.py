"""
Concurrent access control for elankit.

Two elankit processes operating on the same toolchain name could otherwise
race (one removing while another installs). Install and uninstall therefore
hold an exclusive, file-based lock scoped to the toolchain for their whole
duration.

Usage:
    from elankit.core.locking import LockManager

    lock_manager = LockManager(elan_home / "lock")
    with lock_manager.toolchain_lock("stable", timeout=300):
        # Install or remove the toolchain
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)


class LockManager:
    """
    Manages per-toolchain locks.

    Uses file-based locking with the `filelock` library for cross-platform
    compatibility and automatic cleanup on process death.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)

    def lock_path(self, toolchain_name: str) -> Path:
        """Path of the lock file guarding a toolchain."""
        safe_name = (
            toolchain_name.replace("/", "-").replace("\\", "-").replace(":", "-")
        )
        return self.lock_dir / f"toolchain-{safe_name}.lock"

    @contextmanager
    def toolchain_lock(self, toolchain_name: str, timeout: float = 300) -> Iterator[None]:
        """
        Acquire lock for a specific toolchain (for installation/removal).

        Args:
            toolchain_name: Sanitized toolchain name
            timeout: Maximum wait time in seconds (default: 300 for long downloads)

        Raises:
            LockTimeout: If lock can't be acquired within timeout
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.lock_path(toolchain_name)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired toolchain lock: {lock_path}")
                yield
                logger.debug(f"Released toolchain lock: {lock_path}")
        except LockTimeout as e:
            logger.error(
                f"Could not acquire toolchain lock for {toolchain_name} after {timeout}s."
            )
            raise LockTimeout(
                f"Could not acquire toolchain lock for {toolchain_name} after {timeout}s. "
                "Another elankit process may be installing or removing this toolchain."
            ) from e


__all__ = ["LockManager", "LockTimeout"]
