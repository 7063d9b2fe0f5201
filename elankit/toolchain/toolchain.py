"""
elankit/toolchain/toolchain.py

A fully resolved reference to a toolchain which may or may not exist.

`Toolchain` maps a user-facing name to its directory under the toolchains
root and drives the install/update/uninstall lifecycle for it. It also builds
the commands that run binaries from the installation, including fallback
commands that borrow `leanpkg` from one toolchain on behalf of another.
"""

import logging
import os
import re
import webbrowser
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union
from urllib.parse import urlparse

from ..config.cfg import Cfg
from ..core import env_var
from ..core.download import download_file
from ..core.exceptions import (
    BadInstallerTypeError,
    BinaryNotFoundError,
    InvalidCustomToolchainNameError,
    InvalidToolchainDescError,
    TelemetryError,
    ToolchainNotInstalledError,
)
from ..core.filesystem import (
    assert_is_directory,
    assert_is_file,
    hard_link,
    is_directory,
    is_file,
    is_symlink,
    temporary_file,
    to_absolute,
)
from ..core.platform import detect_platform
from ..notifications import NotificationKind
from ..telemetry import Telemetry, TelemetryEvent
from . import install
from .command import Command, new_command, set_env
from .dist import Component, ComponentStatus, DownloadCfg, ToolchainDesc
from .install import Copy, Dist, InstallMethod, Installer, Link

logger = logging.getLogger(__name__)

MAIN_BINARY = "lean"
FALLBACK_BINARY = "leanpkg"
DOC_PARTS = ("share", "doc", "lean", "html")

INSTALLER_EXTENSION = "gz"
INSTALLER_URL_SCHEMES = ("file", "http", "https")

_PATH_HOSTILE = re.compile(r"[:/]")


class UpdateStatus(Enum):
    """Outcome of an install attempt."""

    INSTALLED = "installed"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


def sanitize_name(name: str) -> str:
    """
    Turn a toolchain name into a single path segment.

    Example:
        >>> sanitize_name("leanprover/lean4:stable")
        'leanprover-lean4-stable'
    """
    return _PATH_HOSTILE.sub("-", name)


def installer_extension(installer: str) -> str:
    """Extension of an installer argument, or '(none)' when it has none."""
    index = installer.rfind(".")
    if index < 0:
        return "(none)"
    return installer[index + 1 :]


def _is_installer_url(installer: str) -> bool:
    scheme = urlparse(installer).scheme
    return scheme in INSTALLER_URL_SCHEMES and installer.startswith(f"{scheme}://")


class Toolchain:
    """
    A named toolchain under the configured toolchains directory.

    Constructing a Toolchain never touches the disk.

    Attributes:
        cfg: Configuration shared by all toolchains
        raw_name: Name as given by the user
        name: Sanitized name, used as the directory name
        path: Installation directory
    """

    def __init__(self, cfg: Cfg, name: str):
        self.cfg = cfg
        self.raw_name = name
        self.name = sanitize_name(name)
        self.path = cfg.toolchains_dir / self.name
        self.telemetry = Telemetry(cfg.telemetry_dir)

    @classmethod
    def resolve(cls, cfg: Cfg, name: str) -> "Toolchain":
        return cls(cfg, name)

    def __repr__(self) -> str:
        return f"Toolchain({self.raw_name!r}, path={str(self.path)!r})"

    # ------------------------------------------------------------------
    # Naming & path resolution
    # ------------------------------------------------------------------

    def desc(self) -> ToolchainDesc:
        """Parse the raw name as a distribution descriptor."""
        return ToolchainDesc.from_str(self.raw_name)

    def is_custom(self) -> bool:
        try:
            self.desc()
        except InvalidToolchainDescError:
            return True
        return False

    def is_tracking(self) -> bool:
        try:
            return self.desc().is_tracking()
        except InvalidToolchainDescError:
            return False

    def _is_symlink(self) -> bool:
        return is_symlink(self.path)

    def exists(self) -> bool:
        # Linked toolchains are junctions on Windows, which directory checks
        # do not always report as directories.
        if self.cfg.platform.symlink_check_required and self._is_symlink():
            return True
        return is_directory(self.path)

    def verify(self) -> None:
        """Raise NotADirectory unless the toolchain directory exists."""
        assert_is_directory(self.path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self.cfg.lock_manager.toolchain_lock(self.name, self.cfg.lock_timeout):
            yield

    def _notify(self, kind: NotificationKind, **details) -> None:
        details.setdefault("toolchain", self.name)
        self.cfg.notify(kind, **details)

    def remove(self) -> None:
        """
        Uninstall the toolchain.

        Removing a toolchain that is not installed is not an error. A failed
        removal is raised even after the update-hash has been deleted.
        """
        with self._locked():
            self._remove()

    def _remove(self) -> None:
        if not (self.exists() or self._is_symlink()):
            self._notify(NotificationKind.TOOLCHAIN_NOT_INSTALLED)
            return

        self._notify(NotificationKind.UNINSTALLING_TOOLCHAIN)

        update_hash = self._update_hash()
        if update_hash is not None:
            update_hash.unlink(missing_ok=True)

        try:
            install.uninstall(self.path, self.cfg.notify_handler)
        finally:
            if not self.exists():
                self._notify(NotificationKind.UNINSTALLED_TOOLCHAIN)

    def is_valid_install_method(self, method: InstallMethod) -> bool:
        return install.is_valid_install_method(method, self.is_custom())

    def _check_install_method(self, method: InstallMethod) -> None:
        assert self.is_valid_install_method(
            method
        ), f"{type(method).__name__} cannot install toolchain '{self.raw_name}'"

    def install(self, method: InstallMethod) -> UpdateStatus:
        """Install or update the toolchain with method."""
        self._check_install_method(method)
        with self._locked():
            return self._install(method)

    def _install(self, method: InstallMethod) -> UpdateStatus:
        self._check_install_method(method)

        exists = self.exists()
        if exists:
            self._notify(NotificationKind.UPDATING_TOOLCHAIN)
        else:
            self._notify(NotificationKind.INSTALLING_TOOLCHAIN)
        self._notify(NotificationKind.TOOLCHAIN_DIRECTORY, path=self.path)

        updated = method.run(self.path, self.cfg.notify_handler)

        if updated:
            self._notify(NotificationKind.INSTALLED_TOOLCHAIN)
        else:
            self._notify(NotificationKind.UPDATE_HASH_MATCHES)

        if updated and not exists:
            return UpdateStatus.INSTALLED
        if updated:
            return UpdateStatus.UPDATED
        return UpdateStatus.UNCHANGED

    def install_if_not_installed(self, method: InstallMethod) -> UpdateStatus:
        """Install with method only when the toolchain is absent."""
        self._check_install_method(method)
        with self._locked():
            return self._install_if_not_installed(method)

    def _install_if_not_installed(self, method: InstallMethod) -> UpdateStatus:
        self._check_install_method(method)
        self._notify(NotificationKind.LOOKING_FOR_TOOLCHAIN)

        if self.exists():
            self._notify(NotificationKind.USING_EXISTING_TOOLCHAIN)
            return UpdateStatus.UNCHANGED

        return self._install(method)

    def _update_hash(self) -> Optional[Path]:
        if self.is_custom():
            return None
        return self.cfg.get_hash_file(self.name, create_parent=True)

    def download_cfg(self) -> DownloadCfg:
        return DownloadCfg(
            download_dir=self.cfg.download_dir,
            temp_dir=self.cfg.temp_dir,
            notify_handler=self.cfg.notify_handler,
            platform=detect_platform(),
        )

    def _dist_method(self, force_update: bool) -> Dist:
        return Dist(self.desc(), self._update_hash(), self.download_cfg(), force_update)

    def install_from_dist(self, force_update: bool = False) -> UpdateStatus:
        """Install or update a distribution toolchain."""
        if self.cfg.telemetry_enabled():
            return self._install_from_dist_with_telemetry(force_update)
        return self._install_from_dist_inner(force_update)

    def _install_from_dist_inner(self, force_update: bool) -> UpdateStatus:
        with self._locked():
            return self._install(self._dist_method(force_update))

    def _install_from_dist_with_telemetry(self, force_update: bool) -> UpdateStatus:
        try:
            status = self._install_from_dist_inner(force_update)
        except Exception:
            self._log_update_event()
            raise
        self._log_update_event()
        return status

    def _log_update_event(self) -> None:
        # TODO: record success=False for failed installs once consumers of
        # the telemetry log agree on the change.
        event = TelemetryEvent(toolchain=self.name, success=True)
        try:
            self.telemetry.log_telemetry(event)
        except TelemetryError as e:
            self._notify(NotificationKind.TELEMETRY_CLEANUP_ERROR, error=e)

    def install_from_dist_if_not_installed(self) -> UpdateStatus:
        with self._locked():
            return self._install_if_not_installed(self._dist_method(False))

    def _ensure_custom(self) -> None:
        if not self.is_custom():
            raise InvalidCustomToolchainNameError(self.name)

    def install_from_installers(self, installers: Sequence[Union[str, Path]]) -> None:
        """
        Replace a custom toolchain with the contents of .tar.gz installers.

        Each installer is a local path or a file/http/https URL. Installers
        are applied one by one; a failure part way leaves the earlier ones
        installed.
        """
        self._ensure_custom()

        installers = [os.fspath(i) for i in installers]
        for installer in installers:
            extension = installer_extension(installer)
            if extension != INSTALLER_EXTENSION:
                raise BadInstallerTypeError(extension)

        with self._locked():
            self._remove()

            # TODO: download every installer before installing any of them so
            # a bad URL cannot leave a partial toolchain behind.
            for installer in installers:
                if _is_installer_url(installer):
                    with temporary_file(suffix=".tar.gz", dir=self.cfg.temp_dir) as local:
                        self._notify(NotificationKind.DOWNLOADING, detail=installer)
                        download_file(installer, local)
                        self._install(Installer(local, self.cfg.temp_dir))
                else:
                    self._install(Installer(Path(installer), self.cfg.temp_dir))

    def install_from_dir(self, src: Union[str, Path], link: bool) -> None:
        """
        Install a custom toolchain from a local build tree.

        The tree must contain bin/lean. With link=True the toolchain becomes
        a link to src instead of a copy.
        """
        self._ensure_custom()

        src = Path(src)
        bin_dir = src / "bin"
        assert_is_directory(bin_dir)
        assert_is_file(bin_dir / self.cfg.platform.exe(MAIN_BINARY))

        if link:
            method: InstallMethod = Link(to_absolute(src))
        else:
            method = Copy(src)

        with self._locked():
            self._install(method)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _binary_name(self, binary: Union[str, bytes, os.PathLike]) -> str:
        if not isinstance(binary, str):
            # Names that are not text pass through without a suffix
            return os.fsdecode(binary)
        suffix = self.cfg.platform.executable_extension
        if binary.lower().endswith(suffix):
            return binary
        return f"{binary}{suffix}"

    def create_command(
        self,
        binary: Union[str, bytes, os.PathLike],
        recursion_count: Optional[int] = None,
    ) -> Command:
        """
        Build a command running binary from this toolchain.

        Binaries missing from the toolchain's bin directory are looked up on
        PATH instead, unless the recursion depth has reached
        LEAN_RECURSION_COUNT_MAX.

        Args:
            binary: Binary name, with or without the executable suffix
            recursion_count: Current recursion depth (default: inherited depth)

        Raises:
            ToolchainNotInstalledError: If the toolchain is not installed
            BinaryNotFoundError: If the binary is missing and the depth limit is hit
        """
        if not self.exists():
            raise ToolchainNotInstalledError(self.name)

        if recursion_count is None:
            recursion_count = self.cfg.recursion_count

        binary = self._binary_name(binary)
        bin_path = self.path / "bin" / binary

        if is_file(bin_path):
            program: Union[str, Path] = bin_path
        else:
            if recursion_count >= env_var.LEAN_RECURSION_COUNT_MAX:
                raise BinaryNotFoundError(self.name, binary)
            logger.debug(f"{binary} not in {self.name}, falling back to PATH")
            program = binary

        command = new_command(program)
        self._set_env(command, recursion_count)
        return command

    def create_fallback_command(
        self,
        binary: Union[str, bytes, os.PathLike],
        primary_toolchain: "Toolchain",
        recursion_count: Optional[int] = None,
    ) -> Command:
        """
        Run this toolchain's leanpkg on behalf of primary_toolchain.

        Custom toolchains often lack leanpkg; the fallback borrows it from
        another toolchain while every lean it runs comes from the primary.

        Raises:
            ToolchainNotInstalledError: If either toolchain is not installed
        """
        fallback_exe = self.cfg.platform.exe(FALLBACK_BINARY)
        assert os.fsdecode(binary) in (
            FALLBACK_BINARY,
            fallback_exe,
        ), f"fallback commands are only supported for {FALLBACK_BINARY}"

        if not self.exists():
            raise ToolchainNotInstalledError(self.name)
        if not primary_toolchain.exists():
            raise ToolchainNotInstalledError(primary_toolchain.name)

        if recursion_count is None:
            recursion_count = self.cfg.recursion_count

        src_file = self.path / "bin" / fallback_exe

        # On Windows a spawned process searches its own directory before
        # PATH, so leanpkg next to this toolchain's lean would run the wrong
        # lean. Running a hard link from an otherwise empty directory makes
        # it resolve lean through the proxies on PATH.
        if self.cfg.platform.fallback_via_hardlink:
            exe_path = self.cfg.fallback_dir / fallback_exe
            hard_link(src_file, exe_path)
        else:
            exe_path = src_file

        command = new_command(exe_path)
        self._set_env(command, recursion_count)
        command.set_env(env_var.ELAN_TOOLCHAIN, primary_toolchain.name)
        return command

    def _set_env(self, command: Command, recursion_count: int) -> None:
        set_env(
            command,
            toolchain_name=self.name,
            toolchain_path=self.path,
            elan_dir=self.cfg.elan_dir,
            platform=self.cfg.platform,
            recursion_count=recursion_count,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def doc_path(self, relative: str) -> Path:
        self.verify()
        return self.path.joinpath(*DOC_PARTS, relative)

    def open_docs(self, relative: str) -> bool:
        """Open the documentation page in a browser."""
        self.verify()
        return webbrowser.open(self.doc_path(relative).as_uri())

    def make_default(self) -> None:
        self.cfg.set_default(self.name)

    def make_override(self, path: Union[str, Path]) -> None:
        self.cfg.settings_file.with_mut(
            lambda s: s.add_override(Path(path), self.name, self.cfg.notify_handler)
        )

    def binary_file(self, name: str) -> Path:
        return self.path / "bin" / self.cfg.platform.exe(name)

    def list_components(self) -> List[ComponentStatus]:
        """Report the main binary and leanpkg as components."""
        available = not self.is_custom()
        return [
            ComponentStatus(
                component=Component(MAIN_BINARY),
                required=True,
                installed=is_file(self.binary_file(MAIN_BINARY)),
                available=available,
            ),
            ComponentStatus(
                component=Component(FALLBACK_BINARY),
                required=False,
                installed=is_file(self.binary_file(FALLBACK_BINARY)),
                available=available,
            ),
        ]


__all__ = [
    "FALLBACK_BINARY",
    "MAIN_BINARY",
    "Toolchain",
    "UpdateStatus",
    "installer_extension",
    "sanitize_name",
]
