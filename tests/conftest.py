"""
Pytest configuration and shared fixtures for elankit tests.
"""

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Dict, List

import pytest

from elankit.config import Cfg
from elankit.core.platform import clear_platform_cache
from elankit.core.platform_capabilities import get_platform_capabilities
from elankit.notifications import Notification


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast tests without network access")
    config.addinivalue_line(
        "markers", "integration: tests that exercise several components together"
    )


@pytest.fixture(autouse=True)
def _fresh_platform_cache():
    """Keep platform detection from leaking between tests."""
    clear_platform_cache()
    yield
    clear_platform_cache()


# ============================================================================
# Configuration
# ============================================================================


@pytest.fixture
def notifications() -> List[Notification]:
    """Collects every notification emitted through the cfg fixture."""
    return []


@pytest.fixture
def elan_home(tmp_path: Path) -> Path:
    home = tmp_path / "elan"
    home.mkdir()
    return home


@pytest.fixture
def cfg(elan_home: Path, notifications: List[Notification]) -> Cfg:
    """Configuration rooted in a temporary elan home, at recursion depth 0."""
    return Cfg(
        elan_home,
        notify_handler=notifications.append,
        recursion_count=0,
        platform=get_platform_capabilities(),
        lock_timeout=5,
    )


@pytest.fixture
def kinds(notifications):
    """Return a callable listing the kinds of collected notifications."""

    def _kinds():
        return [n.kind for n in notifications]

    return _kinds


# ============================================================================
# Toolchain Trees and Archives
# ============================================================================


@pytest.fixture
def custom_src(tmp_path: Path, cfg: Cfg) -> Path:
    """A local Lean build tree with bin/lean, a library and docs."""
    src = tmp_path / "lean-build"
    (src / "bin").mkdir(parents=True)
    (src / "lib").mkdir()
    (src / "share" / "doc" / "lean" / "html").mkdir(parents=True)

    lean = src / "bin" / cfg.platform.exe("lean")
    lean.write_text("#!/bin/sh\necho lean\n")
    lean.chmod(0o755)
    (src / "lib" / "libleanshared.so").write_text("lib")
    (src / "share" / "doc" / "lean" / "html" / "index.html").write_text("<html/>")
    return src


@pytest.fixture
def make_tar_gz(tmp_path: Path):
    """Factory building a .tar.gz whose members sit under a single root folder."""

    def _make(name: str, files: Dict[str, str], root: str = "lean") -> Path:
        archive = tmp_path / name
        with tarfile.open(archive, "w:gz") as tar:
            for rel, content in files.items():
                data = content.encode()
                info = tarfile.TarInfo(f"{root}/{rel}")
                info.size = len(data)
                info.mode = 0o755
                tar.addfile(info, io.BytesIO(data))
        return archive

    return _make


@pytest.fixture
def make_zip(tmp_path: Path):
    """Factory building a .zip whose members sit under a single root folder."""

    def _make(name: str, files: Dict[str, str], root: str = "lean") -> Path:
        archive = tmp_path / name
        with zipfile.ZipFile(archive, "w") as zf:
            for rel, content in files.items():
                zf.writestr(f"{root}/{rel}", content)
        return archive

    return _make
