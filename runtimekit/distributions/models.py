"""Data types shared by the installer workflow and vendor distributions."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass
class InstallerOptions:
    """Options for one runtime setup."""

    version: str
    architecture: str = ""  # empty: detect host architecture
    package_type: str = "jdk"  # 'jdk', 'jre', 'jdk+fx', ...
    check_latest: bool = False
    tool_cache_dir: Optional[str] = None


@dataclass(frozen=True)
class ReleaseDescriptor:
    """A remote release chosen for a version range."""

    version: str
    """Semantic version, early-access builds carry build metadata"""

    url: str
    """Archive download URL"""

    download_info: Dict[str, Any] = field(default_factory=dict, compare=False)
    """Vendor-specific download details (checksum, archive type, ...)"""


@dataclass
class InstallResult:
    """Resolved runtime version and its installation directory."""

    version: str
    path: Path
