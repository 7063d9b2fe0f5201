"""
Network download helper with retry logic and checksum verification.

Supports:
- HTTP/HTTPS downloads with TLS verification (via requests)
- file:// URLs, copied from the local filesystem
- Retry logic with exponential backoff
- SHA256 verification during download
"""

import hashlib
import logging
import shutil
import time
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import requests
from requests.exceptions import RequestException

from .exceptions import ChecksumError, DownloadError

logger = logging.getLogger(__name__)


def download_file(
    url: str,
    destination: Path,
    expected_sha256: Optional[str] = None,
    timeout: int = 30,
    max_retries: int = 3,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download file from URL to destination with retry logic and checksum verification.

    Args:
        url: URL to download from (http, https or file scheme)
        destination: Local path to save file
        expected_sha256: Expected SHA256 hash (verified during download)
        timeout: Request timeout in seconds
        max_retries: Maximum number of retry attempts
        session: Optional requests session to reuse

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ChecksumError: If checksum doesn't match expected value
        ValueError: If URL is empty

    Example:
        >>> download_file("https://example.com/lean.tar.gz", Path("lean.tar.gz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    if urlparse(url).scheme == "file":
        return _copy_local(url, destination, expected_sha256)

    http = session or requests

    for attempt in range(max_retries):
        try:
            return _download_streaming(
                http, url, destination, expected_sha256, timeout
            )
        except RequestException as e:
            if attempt == max_retries - 1:
                raise DownloadError(
                    f"Download of {url} failed after {max_retries} attempts: {e}"
                ) from e

            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    raise DownloadError(f"Download of {url} failed for unknown reason")


def _copy_local(url: str, destination: Path, expected_sha256: Optional[str]) -> Path:
    """Satisfy a file:// URL by copying the referenced file."""
    parsed = urlparse(url)
    source = Path(url2pathname(unquote(parsed.path)))

    logger.info(f"Copying {source} to {destination}")
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise DownloadError(f"Could not read {url}: {e}") from e

    if expected_sha256 and not verify_checksum(destination, expected_sha256):
        destination.unlink()
        raise ChecksumError(f"Checksum mismatch for {destination.name}")

    return destination


def _download_streaming(
    http,
    url: str,
    destination: Path,
    expected_sha256: Optional[str],
    timeout: int,
) -> Path:
    """Perform a streaming download, hashing as bytes arrive."""
    logger.info(f"Downloading from {url}")

    response = http.get(url, stream=True, timeout=timeout, allow_redirects=True)
    response.raise_for_status()

    hasher = hashlib.sha256() if expected_sha256 else None
    downloaded = 0

    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=8192):
            if not chunk:
                continue
            f.write(chunk)
            downloaded += len(chunk)
            if hasher:
                hasher.update(chunk)

    if expected_sha256 and hasher:
        actual_hash = hasher.hexdigest()
        if actual_hash.lower() != expected_sha256.lower():
            destination.unlink()
            raise ChecksumError(
                f"Checksum mismatch for {destination.name}: "
                f"expected {expected_sha256}, got {actual_hash}"
            )
        logger.debug("Checksum verified successfully")

    logger.info(f"Download complete: {destination} ({downloaded} bytes)")
    return destination


def verify_checksum(file_path: Path, expected_sha256: str) -> bool:
    """
    Verify file SHA256 checksum.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest().lower() == expected_sha256.lower()


__all__ = [
    "download_file",
    "verify_checksum",
]
