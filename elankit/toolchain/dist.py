"""
elankit/toolchain/dist.py

Distribution toolchains: descriptors, release resolution and installation.

A distribution toolchain is named by a descriptor of the form
``[<owner>/<repo>:]<release>``, for example ``stable``,
``leanprover/lean4:nightly`` or ``v4.9.0``. Releases named by a channel
(``stable``, ``beta``, ``nightly``) track a moving target and are resolved
through the GitHub releases API on every update; all other releases are
pinned tags.
"""

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import requests
from requests.exceptions import RequestException

from ..core.download import download_file
from ..core.exceptions import InvalidToolchainDescError, ReleaseResolutionError
from ..core.filesystem import (
    atomic_write,
    extract_archive,
    normalize_root_directory,
    remove_path,
    temporary_directory,
)
from ..core.platform import PlatformInfo, detect_platform
from ..notifications import Notification, NotificationKind, NotifyHandler

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = "leanprover/lean4"
CHANNELS = ("stable", "beta", "nightly")

GITHUB_API_URL = "https://api.github.com"
GITHUB_URL = "https://github.com"

_DESC_RE = re.compile(
    r"^(?:(?P<origin>[a-zA-Z0-9-]+/[a-zA-Z0-9-]+):)?"
    r"(?P<release>stable|beta|nightly|nightly-\d{4}-\d{2}-\d{2}"
    r"|v?\d+\.\d+\.\d+(?:-[0-9A-Za-z.]+)?)$"
)


@dataclass(frozen=True)
class ToolchainDesc:
    """Structured name of a distribution toolchain."""

    origin: str
    release: str

    @classmethod
    def from_str(cls, name: str) -> "ToolchainDesc":
        """
        Parse a toolchain name.

        Raises:
            InvalidToolchainDescError: If name is not a distribution descriptor

        Example:
            >>> ToolchainDesc.from_str("leanprover/lean4:nightly")
            ToolchainDesc(origin='leanprover/lean4', release='nightly')
            >>> ToolchainDesc.from_str("4.9.0").release
            '4.9.0'
        """
        match = _DESC_RE.match(name)
        if match is None:
            raise InvalidToolchainDescError(name)
        return cls(
            origin=match.group("origin") or DEFAULT_ORIGIN,
            release=match.group("release"),
        )

    def is_tracking(self) -> bool:
        """True if the release is a channel rather than a pinned version."""
        return self.release in CHANNELS

    @property
    def repo(self) -> str:
        """Repository that publishes this release."""
        if self.release.startswith("nightly") and not self.origin.endswith("-nightly"):
            return f"{self.origin}-nightly"
        return self.origin

    def __str__(self) -> str:
        return f"{self.origin}:{self.release}"


@dataclass(frozen=True)
class Component:
    """An installable part of a distribution toolchain."""

    name: str
    target: Optional[str] = None

    def description(self) -> str:
        if self.target:
            return f"{self.name}-{self.target}"
        return self.name


@dataclass(frozen=True)
class ComponentStatus:
    """Read-only projection of a component for listing."""

    component: Component
    required: bool
    installed: bool
    available: bool


@dataclass
class DownloadCfg:
    """Where and how distribution archives are fetched."""

    download_dir: Path
    temp_dir: Path
    notify_handler: NotifyHandler
    platform: PlatformInfo = field(default_factory=detect_platform)
    api_url: str = GITHUB_API_URL
    server_url: str = GITHUB_URL
    session: Optional[requests.Session] = None


@dataclass(frozen=True)
class Release:
    """A concrete, downloadable release."""

    repo: str
    tag: str

    @property
    def version(self) -> str:
        return self.tag[1:] if self.tag.startswith("v") else self.tag

    def asset_name(self, platform: PlatformInfo) -> str:
        return f"lean-{self.version}-{platform.release_suffix()}.zip"

    def download_url(self, cfg: DownloadCfg) -> str:
        return (
            f"{cfg.server_url}/{self.repo}/releases/download/"
            f"{self.tag}/{self.asset_name(cfg.platform)}"
        )


def _get_json(cfg: DownloadCfg, url: str):
    http = cfg.session or requests
    try:
        response = http.get(
            url, headers={"Accept": "application/vnd.github+json"}, timeout=30
        )
        response.raise_for_status()
        return response.json()
    except (RequestException, ValueError) as e:
        raise ReleaseResolutionError(f"Failed to query {url}: {e}") from e


def resolve_release(desc: ToolchainDesc, cfg: DownloadCfg) -> Release:
    """
    Resolve a descriptor to a concrete release.

    Pinned versions are mapped to tags locally; channels query the
    releases API of the publishing repository.

    Raises:
        ReleaseResolutionError: If a channel cannot be resolved
    """
    repo = desc.repo

    if not desc.is_tracking():
        tag = desc.release
        if not tag.startswith(("v", "nightly")):
            tag = f"v{tag}"
        return Release(repo=repo, tag=tag)

    if desc.release == "beta":
        # Newest release of any kind, including release candidates
        releases = _get_json(cfg, f"{cfg.api_url}/repos/{repo}/releases")
        if not releases:
            raise ReleaseResolutionError(f"No releases published for {repo}")
        tag = releases[0].get("tag_name")
    else:
        latest = _get_json(cfg, f"{cfg.api_url}/repos/{repo}/releases/latest")
        tag = latest.get("tag_name")

    if not tag:
        raise ReleaseResolutionError(f"Could not resolve channel '{desc.release}' of {repo}")

    logger.debug(f"Resolved {desc} to {repo}@{tag}")
    return Release(repo=repo, tag=tag)


def update_from_dist(
    desc: ToolchainDesc,
    prefix: Path,
    update_hash: Optional[Path],
    cfg: DownloadCfg,
    force_update: bool,
) -> bool:
    """
    Install or update a distribution toolchain at prefix.

    The update-hash file records the URL of the last installed archive.
    When it still matches the resolved release and the toolchain exists,
    nothing is downloaded unless force_update is set.

    Returns:
        True if the toolchain on disk changed
    """
    release = resolve_release(desc, cfg)
    url = release.download_url(cfg)

    if (
        not force_update
        and update_hash is not None
        and update_hash.is_file()
        and prefix.exists()
        and update_hash.read_text(encoding="utf-8").strip() == url
    ):
        logger.info(f"{desc} is up to date ({release.tag})")
        return False

    archive = cfg.download_dir / release.asset_name(cfg.platform)
    cfg.notify_handler(Notification(NotificationKind.DOWNLOADING, detail=url))
    download_file(url, archive, session=cfg.session)

    with temporary_directory(prefix="dist-", dir=cfg.temp_dir) as extract_dir:
        cfg.notify_handler(Notification(NotificationKind.EXTRACTING, path=archive))
        extract_archive(archive, extract_dir)
        root = normalize_root_directory(extract_dir)

        remove_path(prefix)
        prefix.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(root), str(prefix))

    if update_hash is not None:
        atomic_write(update_hash, url)

    logger.info(f"Installed {desc} ({release.tag}) to {prefix}")
    return True


__all__ = [
    "CHANNELS",
    "DEFAULT_ORIGIN",
    "Component",
    "ComponentStatus",
    "DownloadCfg",
    "Release",
    "ToolchainDesc",
    "resolve_release",
    "update_from_dist",
]
