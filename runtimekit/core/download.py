"""
Network transport for runtime catalogs and archives.

This module provides the HTTP layer beneath the distribution installers:
- JSON catalog retrieval
- Streaming archive downloads with progress reporting
- Retry with exponential backoff for timeouts and refused connections
- Checksum verification during download

Transport failures are re-raised as the original requests exceptions so
callers can inspect status codes and socket errors.
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import requests
from requests.exceptions import ConnectionError, Timeout

logger = logging.getLogger(__name__)

USER_AGENT = "runtimekit"


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second

    def __str__(self) -> str:
        """Format progress for display."""
        mb_downloaded = self.bytes_downloaded / 1024 / 1024
        speed_mbps = self.speed_bps / 1024 / 1024
        if self.total_bytes > 0:
            mb_total = self.total_bytes / 1024 / 1024
            return (
                f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
                f"({self.percentage:.1f}%) at {speed_mbps:.1f} MB/s"
            )
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


class ChecksumError(Exception):
    """Exception raised when checksum verification fails."""

    pass


class StreamingHasher:
    """Compute hash incrementally for streaming downloads."""

    def __init__(self, algorithm: str = "sha256"):
        """
        Initialize streaming hasher.

        Args:
            algorithm: Hash algorithm ('sha256')

        Raises:
            ValueError: If algorithm is not supported
        """
        self.algorithm = algorithm.lower()

        if self.algorithm != "sha256":
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")
        self.hasher = hashlib.sha256()

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def finalize(self) -> str:
        """Get final hash value as hex string."""
        return self.hasher.hexdigest()

    def verify(self, expected_hash: str) -> bool:
        """Check if computed hash matches expected value (case-insensitive)."""
        return self.finalize().lower() == expected_hash.lower()


def fetch_json(url: str, timeout: int = 30, max_retries: int = 3) -> Any:
    """
    GET a JSON document.

    Args:
        url: Catalog URL
        timeout: Request timeout in seconds
        max_retries: Attempts for timeouts and connection failures

    Returns:
        Decoded JSON body

    Raises:
        requests.HTTPError: On a non-2xx response
        requests.ConnectionError / requests.Timeout: After the last failed attempt
    """
    logger.debug(f"Fetching {url}")

    def _get():
        response = requests.get(
            url,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json()

    return _with_retries(_get, url, max_retries)


def download_file(
    url: str,
    destination: Path,
    expected_sha256: Optional[str] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download file from URL to destination with retry logic and checksum verification.

    Args:
        url: URL to download from
        destination: Local path to save file
        expected_sha256: Expected SHA256 hash (verified during download)
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts for transient failures

    Returns:
        Path to downloaded file

    Raises:
        requests.HTTPError: On a non-2xx response (not retried)
        requests.ConnectionError / requests.Timeout: After the last failed attempt
        ChecksumError: If checksum doesn't match expected value
        ValueError: If URL or destination is invalid

    Example:
        >>> url = "https://example.com/jdk-17.tar.gz"
        >>> download_file(url, Path("downloads/jdk-17.tar.gz"), expected_sha256="abc123...")
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    return _with_retries(
        lambda: _download_with_progress(
            url=url,
            destination=destination,
            expected_sha256=expected_sha256,
            progress_callback=progress_callback,
            timeout=timeout,
        ),
        url,
        max_retries,
    )


def _with_retries(operation: Callable[[], Any], url: str, max_retries: int) -> Any:
    for attempt in range(max_retries):
        try:
            return operation()
        except (Timeout, ConnectionError) as e:
            if attempt == max_retries - 1:
                logger.error(f"Request to {url} failed after {max_retries} attempts")
                raise

            backoff_seconds = 2**attempt
            logger.warning(
                f"Attempt {attempt + 1} for {url} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    raise ValueError("max_retries must be at least 1")


def _download_with_progress(
    url: str,
    destination: Path,
    expected_sha256: Optional[str],
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
) -> Path:
    """
    Perform download with streaming and progress updates.

    Raises:
        ChecksumError: If checksum doesn't match
        RequestException: If HTTP request fails
    """
    logger.info(f"Downloading from {url}")

    response = requests.get(
        url,
        headers={"User-Agent": USER_AGENT},
        stream=True,
        timeout=timeout,
        allow_redirects=True,
    )
    response.raise_for_status()

    content_length = response.headers.get("content-length")
    total_size = int(content_length) if content_length else 0

    hasher = StreamingHasher("sha256") if expected_sha256 else None

    downloaded = 0
    reported = 0
    start_time = time.time()
    last_progress_time = start_time

    def report(current_time: float) -> None:
        elapsed = current_time - start_time
        progress_callback(
            DownloadProgress(
                bytes_downloaded=downloaded,
                total_bytes=total_size if total_size > 0 else downloaded,
                percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
                speed_bps=downloaded / elapsed if elapsed > 0 else 0,
            )
        )

    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=8192):
            if not chunk:
                continue
            f.write(chunk)
            downloaded += len(chunk)

            if hasher:
                hasher.update(chunk)

            # Report progress at most twice per second
            current_time = time.time()
            if progress_callback and (
                current_time - last_progress_time >= 0.5 or downloaded == total_size
            ):
                report(current_time)
                reported = downloaded
                last_progress_time = current_time

    # Completion is always reported, even without a content-length header
    if progress_callback and reported != downloaded:
        report(time.time())

    if hasher and not hasher.verify(expected_sha256):
        actual_hash = hasher.finalize()
        destination.unlink()
        raise ChecksumError(
            f"Checksum mismatch for {destination.name}: "
            f"expected {expected_sha256}, got {actual_hash}"
        )

    logger.info(f"Download complete: {destination}")
    return destination


__all__ = [
    "DownloadProgress",
    "ChecksumError",
    "StreamingHasher",
    "fetch_json",
    "download_file",
]
