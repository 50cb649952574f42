"""
Shared tool cache store for installed runtimes.

Installed runtimes are keyed by (folder, version token, architecture). The
store is shared between concurrent processes: entries are only ever added
or replaced, never removed, and a marker file written after the copy marks
an entry as usable.

Example:
    >>> cache = ToolCache(Path("/opt/hostedtoolcache"))
    >>> cache.find_all_versions("Java_temurin_jdk", "x64")
    ['11.0.3-4', '17.0.0-ea.1']
"""

import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Union

from filelock import FileLock, Timeout

from runtimekit.core.directory import get_tool_cache_dir
from runtimekit.core.exceptions import ToolCacheError, ToolCacheLockTimeout

logger = logging.getLogger(__name__)


class ToolCache:
    """
    Manages the on-disk tool cache with process-safe registration.

    Layout:
        <root>/<folder>/<version>/<arch>/
        <root>/<folder>/<version>/<arch>.complete
    """

    def __init__(self, root: Optional[Union[str, Path]] = None, lock_timeout: int = 300):
        """
        Initialize tool cache.

        Args:
            root: Cache root (default: get_tool_cache_dir())
            lock_timeout: Timeout in seconds for acquiring an entry lock
        """
        self.root = Path(root) if root is not None else get_tool_cache_dir()
        self.lock_dir = self.root / "lock"
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized tool cache at {self.root}")

    def find_all_versions(self, folder: str, arch: str) -> List[str]:
        """
        List version tokens with a complete installation for the architecture.

        Args:
            folder: Tool folder name (e.g., 'Java_temurin_jdk')
            arch: Architecture

        Returns:
            Sorted list of raw on-disk version tokens
        """
        tool_dir = self.root / folder
        if not tool_dir.is_dir():
            return []

        tokens = []
        for child in tool_dir.iterdir():
            if not child.is_dir():
                continue
            if (child / arch).is_dir() and self._marker_path(child, arch).exists():
                tokens.append(child.name)

        return sorted(tokens)

    def find_path(self, folder: str, token: str, arch: str) -> Optional[Path]:
        """
        Resolve the installation path for a version token.

        Returns:
            Installation directory, or None when it is missing or incomplete
        """
        version_dir = self.root / folder / token
        install_dir = version_dir / arch
        if install_dir.is_dir() and self._marker_path(version_dir, arch).exists():
            return install_dir
        logger.debug(f"No complete tool cache entry for {folder}/{token}/{arch}")
        return None

    def cache_dir(
        self, source: Union[str, Path], folder: str, token: str, arch: str
    ) -> Path:
        """
        Copy an extracted runtime into the cache and mark it complete.

        An existing entry under the same key is replaced.

        Args:
            source: Directory holding the extracted runtime
            folder: Tool folder name
            token: Encoded version token
            arch: Architecture

        Returns:
            Path to the cached installation

        Raises:
            ToolCacheError: If source is missing or copying fails
            ToolCacheLockTimeout: If the entry lock cannot be acquired
        """
        source = Path(source)
        if not source.is_dir():
            raise ToolCacheError(f"Source directory not found: {source}")

        version_dir = self.root / folder / token
        install_dir = version_dir / arch
        marker = self._marker_path(version_dir, arch)

        with self._entry_lock(folder, token, arch):
            logger.info(f"Caching runtime from {source} to {install_dir}")
            try:
                marker.unlink(missing_ok=True)
                if install_dir.exists():
                    shutil.rmtree(install_dir)
                install_dir.parent.mkdir(parents=True, exist_ok=True)
                shutil.copytree(source, install_dir, symlinks=True)
                marker.write_text("", encoding="utf-8")
            except OSError as e:
                logger.error(f"Failed to cache runtime: {e}")
                raise ToolCacheError(
                    f"Failed to cache {folder} {token} ({arch}): {e}"
                ) from e

        return install_dir

    @staticmethod
    def _marker_path(version_dir: Path, arch: str) -> Path:
        return version_dir / f"{arch}.complete"

    @contextmanager
    def _entry_lock(self, folder: str, token: str, arch: str):
        """
        Acquire exclusive lock for one cache entry.

        Raises:
            ToolCacheLockTimeout: If lock cannot be acquired within timeout
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.lock_dir / f"{folder}-{token}-{arch}.lock"
        lock = FileLock(lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                logger.debug(f"Acquired tool cache lock: {lock_path}")
                yield
            logger.debug(f"Released tool cache lock: {lock_path}")
        except Timeout as e:
            logger.error(
                f"Failed to acquire tool cache lock within {self.lock_timeout}s"
            )
            raise ToolCacheLockTimeout(
                f"Could not acquire lock for {folder} {token} ({arch}) "
                f"within {self.lock_timeout} seconds"
            ) from e


__all__ = ["ToolCache"]
