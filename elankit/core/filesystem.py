"""
Cross-platform file system utilities for elankit.

This module provides the platform-aware file operations the toolchain core
relies on:
- Structural checks (directory/file assertions, symlink detection)
- Link creation (symlinks on Unix, directory junctions on Windows, hard links)
- Archive extraction (tar.gz, zip)
- Safe file operations (atomic writes, safe deletion, recursive copy)
- Scoped temporary files and directories
"""

import logging
import os
import shutil
import subprocess
import sys
import tarfile
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from .exceptions import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
    LinkCreationError,
    NotADirectory,
    NotAFile,
    UnsupportedArchiveFormat,
)

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def is_directory(path: Union[str, Path]) -> bool:
    """Return True if path is a directory (following symlinks)."""
    return Path(path).is_dir()


def is_file(path: Union[str, Path]) -> bool:
    """Return True if path is a regular file (following symlinks)."""
    return Path(path).is_file()


def is_symlink(path: Union[str, Path]) -> bool:
    """Return True if path itself is a symlink, without following it."""
    try:
        return Path(path).is_symlink()
    except OSError:
        return False


def assert_is_directory(path: Union[str, Path]) -> None:
    """
    Raise NotADirectory unless path is a directory.

    Example:
        >>> assert_is_directory('/tmp')
    """
    if not is_directory(path):
        raise NotADirectory(path)


def assert_is_file(path: Union[str, Path]) -> None:
    """Raise NotAFile unless path is a regular file."""
    if not is_file(path):
        raise NotAFile(path)


def to_absolute(path: Union[str, Path]) -> Path:
    """
    Make a path absolute relative to the current directory.

    Unlike Path.resolve() this does not follow symlinks.
    """
    return Path(os.path.abspath(path))


def is_relative_to(path: Path, parent: Path) -> bool:
    """Check if path is relative to (under) parent directory."""
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Link Creation
# ============================================================================


def _create_junction(source: Path, target: Path) -> None:
    """Create a Windows directory junction (no admin rights needed)."""
    try:
        import _winapi

        _winapi.CreateJunction(str(source), str(target))  # type: ignore[attr-defined]
        return
    except (ImportError, AttributeError, OSError) as e:
        logger.debug(f"_winapi.CreateJunction failed: {e}, trying mklink")

    result = subprocess.run(
        ["cmd", "/c", "mklink", "/J", str(target), str(source)],
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        raise LinkCreationError(f"Failed to create junction: {result.stderr}")


def create_link(source: Union[str, Path], target: Union[str, Path]) -> None:
    """
    Create a directory link at target pointing to source.

    On Windows a junction is created, elsewhere a symbolic link.

    Args:
        source: Existing directory the link points to
        target: Path where the link is created

    Raises:
        LinkCreationError: If the target exists as a real directory or
            the link cannot be created
    """
    source = Path(source)
    target = Path(target)

    target.parent.mkdir(parents=True, exist_ok=True)

    if target.is_symlink() or target.is_file():
        target.unlink()
    elif target.exists():
        raise LinkCreationError(
            f"Target path exists as a directory: {target}. "
            "Remove it before creating a link."
        )

    try:
        if IS_WINDOWS:
            _create_junction(source, target)
        else:
            os.symlink(source, target, target_is_directory=True)
    except OSError as e:
        raise LinkCreationError(f"Failed to link {target} -> {source}: {e}") from e

    logger.debug(f"Created link: {target} -> {source}")


def remove_link(path: Union[str, Path]) -> None:
    """Remove a symlink or junction without touching its target."""
    path = Path(path)
    if IS_WINDOWS and path.is_dir() and not path.is_symlink():
        # Junctions are removed with rmdir, not unlink
        os.rmdir(path)
    else:
        path.unlink()
    logger.debug(f"Removed link: {path}")


def hard_link(source: Union[str, Path], target: Union[str, Path]) -> None:
    """
    Hard link source to target, replacing a stale target.

    Raises:
        FilesystemError: If the old target cannot be removed or the link fails
    """
    source = Path(source)
    target = Path(target)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"unable to create dir to hold {target.name}: {e}") from e

    if target.exists() or target.is_symlink():
        try:
            target.unlink()
        except OSError as e:
            raise FilesystemError(f"unable to unlink old {target}: {e}") from e

    try:
        os.link(source, target)
    except OSError as e:
        raise FilesystemError(f"unable to hard link {source} to {target}: {e}") from e


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    archive_format: Optional[str] = None,
) -> None:
    """
    Extract an archive to a destination directory.

    Supported formats: .zip and .tar.gz/.tgz. The format is taken from the
    file name unless archive_format (e.g. "tar.gz") is given.

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths

    Example:
        >>> extract_archive('lean-4.0.0-linux.tar.gz', '/tmp/lean')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)
    if archive_format is None:
        archive_name = archive_path.name.lower()
    else:
        archive_name = f".{archive_format.lower()}"

    try:
        if archive_name.endswith(".zip"):
            _extract_zip(archive_path, destination)
        elif archive_name.endswith((".tar.gz", ".tgz")):
            _extract_tar_gz(archive_path, destination)
        else:
            raise UnsupportedArchiveFormat(
                f"Unsupported archive format: {archive_path.name}. "
                "Supported: .zip, .tar.gz"
            )
    except (InsecureArchiveError, UnsupportedArchiveFormat):
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive, restoring executable bits."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            extracted = zf.extract(member, destination)
            mode = (member.external_attr >> 16) & 0o777
            if mode and not member.is_dir():
                os.chmod(extracted, mode)


def _extract_tar_gz(archive_path: Path, destination: Path) -> None:
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


def normalize_root_directory(extract_dir: Path) -> Path:
    """
    Return the real root of an extracted archive.

    Archives with a single top-level folder are unwrapped; otherwise the
    extraction directory itself is the root.
    """
    items = list(extract_dir.iterdir())

    if len(items) == 1 and items[0].is_dir():
        return items[0]

    return extract_dir


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    Example:
        >>> atomic_write('update-hashes/stable', 'https://...')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory so the rename stays on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree, clearing read-only bits on Windows.

    A missing path is not an error.

    Raises:
        FilesystemError: If path is not a directory or deletion fails
    """
    path = Path(path).resolve()

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    def handle_remove_readonly(func, failed_path, exc):
        """Error handler for read-only files on Windows."""
        if not os.access(failed_path, os.W_OK):
            os.chmod(failed_path, 0o777)
            func(failed_path)
        else:
            raise exc if isinstance(exc, BaseException) else exc[1]

    try:
        if IS_WINDOWS and sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=handle_remove_readonly)
        elif IS_WINDOWS:
            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def remove_path(path: Union[str, Path]) -> None:
    """
    Remove a toolchain location, whether it is a link or a real directory.

    Links are removed without touching their target.
    """
    path = Path(path)

    if path.is_symlink() or (IS_WINDOWS and _is_junction(path)):
        remove_link(path)
    elif path.is_dir():
        safe_rmtree(path)
    elif path.exists():
        path.unlink()


def _is_junction(path: Path) -> bool:
    is_junction = getattr(os.path, "isjunction", None)
    if is_junction is not None:
        return is_junction(path)
    try:
        st = os.stat(path, follow_symlinks=False)
    except OSError:
        return False
    return bool(getattr(st, "st_file_attributes", 0) & 0x400)


def recursive_copy(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Recursively copy a directory tree, merging into an existing destination.

    Symlinks inside the tree are copied as symlinks.
    """
    source = Path(source)
    destination = Path(destination)

    if not source.exists():
        raise FilesystemError(f"Source does not exist: {source}")

    if not source.is_dir():
        raise FilesystemError(f"Source is not a directory: {source}")

    destination.mkdir(parents=True, exist_ok=True)

    for item in sorted(source.rglob("*")):
        dest_item = destination / item.relative_to(source)

        if item.is_symlink():
            if dest_item.exists() or dest_item.is_symlink():
                dest_item.unlink()
            os.symlink(os.readlink(item), dest_item)
        elif item.is_dir():
            dest_item.mkdir(parents=True, exist_ok=True)
        else:
            dest_item.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, dest_item)


# ============================================================================
# Temporary File/Directory Management
# ============================================================================


@contextmanager
def temporary_directory(
    prefix: str = "elankit_", dir: Optional[Union[str, Path]] = None
) -> Iterator[Path]:
    """
    Context manager for temporary directory with automatic cleanup.

    Example:
        >>> with temporary_directory() as tmp:
        ...     (tmp / 'file.txt').write_text('test')
    """
    if dir is not None:
        Path(dir).mkdir(parents=True, exist_ok=True)
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=dir))

    try:
        yield temp_dir
    finally:
        if temp_dir.exists():
            safe_rmtree(temp_dir)


@contextmanager
def temporary_file(
    suffix: str = "", prefix: str = "elankit_", dir: Optional[Union[str, Path]] = None
) -> Iterator[Path]:
    """
    Context manager yielding the path of an empty temporary file.

    The file is removed on exit.
    """
    if dir is not None:
        Path(dir).mkdir(parents=True, exist_ok=True)
    fd, path_str = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=dir)
    os.close(fd)
    temp_path = Path(path_str)

    try:
        yield temp_path
    finally:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove temporary file {temp_path}: {e}")


__all__ = [
    "is_directory",
    "is_file",
    "is_symlink",
    "assert_is_directory",
    "assert_is_file",
    "to_absolute",
    "is_relative_to",
    "create_link",
    "remove_link",
    "hard_link",
    "extract_archive",
    "normalize_root_directory",
    "atomic_write",
    "safe_rmtree",
    "remove_path",
    "recursive_copy",
    "temporary_directory",
    "temporary_file",
]
