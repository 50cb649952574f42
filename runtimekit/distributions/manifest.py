"""
Distribution backed by a JSON release manifest.

The manifest lists downloadable releases:

    {
      "releases": [
        {"version": "17.0.2+8", "url": "https://.../jdk-17.0.2.tar.gz",
         "sha256": "...", "early_access": false},
        ...
      ]
    }

Releases may also carry "architecture" and "package_type"; when present
they must match the request.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from runtimekit.core.download import DownloadProgress, download_file, fetch_json
from runtimekit.core.exceptions import ConfigError, ReleaseNotFoundError
from runtimekit.core.filesystem import archive_root, extract_archive, temporary_directory
from runtimekit.core.versions import max_satisfying
from runtimekit.distributions.base import RuntimeInstaller
from runtimekit.distributions.models import (
    InstallerOptions,
    InstallResult,
    ReleaseDescriptor,
)

logger = logging.getLogger(__name__)


class ManifestDistribution(RuntimeInstaller):
    """Installs runtimes listed in a JSON release manifest."""

    def __init__(
        self,
        options: InstallerOptions,
        manifest_url: Optional[str] = None,
        distribution: str = "manifest",
        timeout: int = 30,
        **kwargs,
    ):
        """
        Initialize manifest distribution.

        Args:
            options: Setup options
            manifest_url: URL of the release manifest
            distribution: Distribution name used for cache folder and outputs
            timeout: HTTP timeout in seconds
            **kwargs: Passed to RuntimeInstaller

        Raises:
            ConfigError: If no manifest URL is given
        """
        super().__init__(distribution, options, **kwargs)
        if not manifest_url:
            raise ConfigError("The manifest distribution requires a manifest URL")
        self.manifest_url = manifest_url
        self.timeout = timeout

    async def find_package_for_download(self, version_range: str) -> ReleaseDescriptor:
        manifest = await asyncio.to_thread(
            fetch_json, self.manifest_url, timeout=self.timeout
        )
        releases = self._matching_releases(manifest)
        logger.debug(f"Manifest lists {len(releases)} candidate releases")

        best = max_satisfying(releases, version_range)
        if best is None:
            raise ReleaseNotFoundError(
                self.distribution, version_range, self.distribution_architecture()
            )

        entry = releases[best]
        return ReleaseDescriptor(
            version=best,
            url=entry["url"],
            download_info={"sha256": entry.get("sha256")},
        )

    async def download_tool(self, release: ReleaseDescriptor) -> InstallResult:
        path = await asyncio.to_thread(self._install, release)
        return InstallResult(version=release.version, path=path)

    def _install(self, release: ReleaseDescriptor) -> Path:
        archive_name = release.url.rstrip("/").rsplit("/", 1)[-1].split("?", 1)[0]

        with temporary_directory() as work_dir:
            archive = download_file(
                release.url,
                work_dir / archive_name,
                expected_sha256=release.download_info.get("sha256"),
                progress_callback=self._log_progress,
                timeout=self.timeout,
            )
            extracted = extract_archive(archive, work_dir / "extracted")
            return self.tool_cache.cache_dir(
                archive_root(extracted),
                self.tool_cache_folder_name,
                self.cache_version_name(release.version),
                self.architecture,
            )

    def _log_progress(self, progress: DownloadProgress) -> None:
        logger.info(f"Downloading {self.runtime_name}: {progress}")

    def _matching_releases(self, manifest: Any) -> Dict[str, Dict[str, Any]]:
        """Index manifest releases matching stability, arch and package type."""
        if not isinstance(manifest, dict) or not isinstance(
            manifest.get("releases"), list
        ):
            raise ValueError(f"Malformed release manifest at {self.manifest_url}")

        arch = self.distribution_architecture()
        matching: Dict[str, Dict[str, Any]] = {}
        for entry in manifest["releases"]:
            if not isinstance(entry, dict) or "version" not in entry or "url" not in entry:
                logger.debug(f"Skipping malformed manifest entry: {entry!r}")
                continue
            if bool(entry.get("early_access", False)) == self.stable:
                continue
            if entry.get("architecture", arch) != arch:
                continue
            if entry.get("package_type", self.package_type) != self.package_type:
                continue
            matching[str(entry["version"])] = entry
        return matching
