"""
Vendor distributions and the installer registry.

Example:
    >>> installer = get_installer("manifest", options, manifest_url=url)
    >>> result = asyncio.run(installer.setup())
"""

from typing import Dict, Type

from runtimekit.core.exceptions import UnknownDistributionError
from runtimekit.distributions.base import RuntimeInstaller
from runtimekit.distributions.manifest import ManifestDistribution
from runtimekit.distributions.models import (
    InstallerOptions,
    InstallResult,
    ReleaseDescriptor,
)

_DISTRIBUTIONS: Dict[str, Type[RuntimeInstaller]] = {
    "manifest": ManifestDistribution,
}


def register_distribution(name: str, installer_class: Type[RuntimeInstaller]) -> None:
    """Register an installer class under a distribution name."""
    _DISTRIBUTIONS[name.lower()] = installer_class


def get_installer(name: str, options: InstallerOptions, **kwargs) -> RuntimeInstaller:
    """
    Create the installer for a distribution.

    Args:
        name: Distribution name (case-insensitive)
        options: Setup options
        **kwargs: Installer-specific arguments (e.g., manifest_url)

    Raises:
        UnknownDistributionError: If no installer is registered for name
    """
    installer_class = _DISTRIBUTIONS.get(name.lower())
    if installer_class is None:
        raise UnknownDistributionError(name)
    return installer_class(distribution=name.lower(), options=options, **kwargs)


def available_distributions() -> list[str]:
    """Names of registered distributions."""
    return sorted(_DISTRIBUTIONS)


__all__ = [
    "RuntimeInstaller",
    "ManifestDistribution",
    "InstallerOptions",
    "InstallResult",
    "ReleaseDescriptor",
    "register_distribution",
    "get_installer",
    "available_distributions",
]
