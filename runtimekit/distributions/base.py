"""
Runtime installer workflow.

RuntimeInstaller drives one setup: look in the tool cache, otherwise (or when
a freshness check is requested) ask the vendor catalog for the best release,
download it unless the cached copy is already that version, then publish
the result to the host environment.

Vendors subclass RuntimeInstaller and implement two coroutines:

    find_package_for_download(range) -> ReleaseDescriptor
    download_tool(release) -> InstallResult

download_tool must register its result in the tool cache under
cache_version_name() so later lookups find it.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from runtimekit.core.diagnostics import classify, log_diagnostics
from runtimekit.core.platform import (
    PlatformInfo,
    detect_platform,
    distribution_architecture,
)
from runtimekit.core.publisher import EnvironmentPublisher, GitHubActionsPublisher
from runtimekit.core.tool_cache import ToolCache
from runtimekit.core.versions import (
    decode_cache_version,
    encode_cache_version,
    is_version_satisfies,
    major_version,
    normalize_version,
    sort_versions_descending,
)
from runtimekit.distributions.models import (
    InstallerOptions,
    InstallResult,
    ReleaseDescriptor,
)

logger = logging.getLogger(__name__)

# JDK bundles on macOS keep the runtime under this nested directory
MACOS_CONTENT_POSTFIX = Path("Contents") / "Home"


class RuntimeInstaller(ABC):
    """
    Base class for vendor distributions.

    Attributes:
        runtime_name: Display name and tool cache folder prefix
        home_variable: Environment variable pointing at the installation
    """

    runtime_name = "Java"
    home_variable = "JAVA_HOME"

    def __init__(
        self,
        distribution: str,
        options: InstallerOptions,
        tool_cache: Optional[ToolCache] = None,
        publisher: Optional[EnvironmentPublisher] = None,
        platform_info: Optional[PlatformInfo] = None,
    ):
        """
        Initialize installer.

        Args:
            distribution: Distribution name (e.g., 'temurin')
            options: Setup options
            tool_cache: Tool cache store (default: rooted at options.tool_cache_dir)
            publisher: Environment publisher (default: GitHub Actions files)
            platform_info: Host platform (default: detected)

        Raises:
            InvalidVersionSpec: If options.version is not a valid range
        """
        self.distribution = distribution
        self.platform_info = platform_info or detect_platform()

        spec = normalize_version(options.version)
        self.version = spec.range
        self.stable = spec.stable
        self.architecture = options.architecture or self.platform_info.arch
        self.package_type = options.package_type
        self.check_latest = options.check_latest

        self.tool_cache = tool_cache or ToolCache(options.tool_cache_dir)
        self.publisher = publisher or GitHubActionsPublisher()

    @abstractmethod
    async def find_package_for_download(self, version_range: str) -> ReleaseDescriptor:
        """
        Resolve the best remote release for a range.

        Raises:
            ReleaseNotFoundError: If the catalog has no satisfying release
            requests.RequestException: On transport failure
        """
        pass

    @abstractmethod
    async def download_tool(self, release: ReleaseDescriptor) -> InstallResult:
        """
        Download, extract and register a release in the tool cache.

        Returns:
            InstallResult pointing into the tool cache
        """
        pass

    async def setup(self) -> InstallResult:
        """
        Resolve, install if needed, and publish the runtime.

        Returns:
            InstallResult of the runtime that was made the default

        Raises:
            Exception: Whatever the vendor resolution or download raised,
                unchanged, after its diagnostics are logged
        """
        found = self.find_in_tool_cache()
        if found and not self.check_latest:
            logger.info(f"Resolved {self.runtime_name} {found.version} from tool-cache")
        else:
            logger.info("Trying to resolve the latest version from remote")
            try:
                release = await self.find_package_for_download(self.version)
                logger.info(f"Resolved latest version as {release.version}")
                if found and found.version == release.version:
                    logger.info(
                        f"Resolved {self.runtime_name} {found.version} from tool-cache"
                    )
                else:
                    logger.info("Trying to download...")
                    found = await self.download_tool(release)
                    logger.info(f"{self.runtime_name} {found.version} was downloaded")
            except Exception as error:
                self._report_failure(error)
                raise

        found = InstallResult(version=found.version, path=self.correct_path(found.path))

        logger.info(f"Setting {self.runtime_name} {found.version} as the default")
        self.publish(found.version, found.path)

        return found

    def _report_failure(self, error: Exception) -> None:
        try:
            log_diagnostics(classify(error), logger)
        except Exception as diagnostics_error:
            logger.warning(f"Could not classify failure: {diagnostics_error}")
            logger.error(f"{type(error).__name__}: {error}")
        logger.debug("Failure details", exc_info=error)

    @property
    def tool_cache_folder_name(self) -> str:
        return f"{self.runtime_name}_{self.distribution}_{self.package_type}"

    def cache_version_name(self, version: str) -> str:
        """Tool cache token for a version under this request's stability."""
        return encode_cache_version(version, self.stable)

    def find_in_tool_cache(self) -> Optional[InstallResult]:
        """
        Find the best cached installation for the request.

        Only entries with the requested stability are considered: an
        early-access request never picks a stable build and vice versa.

        Returns:
            Highest satisfying cached installation, or None
        """
        candidates = {}
        for token in self.tool_cache.find_all_versions(
            self.tool_cache_folder_name, self.architecture
        ):
            version, stable = decode_cache_version(token)
            if stable != self.stable:
                continue
            if not is_version_satisfies(self.version, version):
                continue
            path = self.tool_cache.find_path(
                self.tool_cache_folder_name, token, self.architecture
            )
            if path is None:
                continue
            candidates[version] = path

        if not candidates:
            return None

        best = sort_versions_descending(candidates)[0]
        return InstallResult(version=best, path=candidates[best])

    def correct_path(self, path: Path) -> Path:
        """Redirect to Contents/Home for macOS bundle layouts when present."""
        bundle_home = Path(path) / MACOS_CONTENT_POSTFIX
        if self.platform_info.is_macos and bundle_home.is_dir():
            return bundle_home
        return Path(path)

    def publish(self, version: str, path: Path) -> None:
        """Export the installation to the host environment and step outputs."""
        tool_path = str(path)
        self.publisher.set_variable(self.home_variable, tool_path)
        self.publisher.prepend_path(str(Path(path) / "bin"))
        self.publisher.set_output("distribution", self.distribution)
        self.publisher.set_output("path", tool_path)
        self.publisher.set_output("version", version)
        self.publisher.set_variable(
            f"{self.home_variable}_{major_version(version)}_{self.architecture.upper()}",
            tool_path,
        )

    def distribution_architecture(self) -> str:
        """Architecture name used in vendor catalogs; override for vendor quirks."""
        return distribution_architecture(self.architecture)


__all__ = [
    "MACOS_CONTENT_POSTFIX",
    "RuntimeInstaller",
]
