"""
Directory management for RuntimeKit.

Resolves the tool cache root that installed runtimes live under.

Directory Structure:
    Tool cache (RUNNER_TOOL_CACHE, or ~/.runtimekit/toolcache):
        - <folder>/<version>/<arch>/   : Installed runtime
        - <folder>/<version>/<arch>.complete : Marker written after install
        - lock/                         : Concurrent access control files
"""

import os
from pathlib import Path
from typing import Mapping, Optional, Union

TOOL_CACHE_ENV = "RUNNER_TOOL_CACHE"


class DirectoryError(Exception):
    """Base exception for directory-related errors."""

    pass


def get_global_cache_dir() -> Path:
    """
    Get the platform-specific RuntimeKit home directory.

    Returns:
        Path: The RuntimeKit home directory.
            - Windows: %USERPROFILE%\\.runtimekit
            - Linux/macOS: ~/.runtimekit/
    """
    if os.name == "nt":  # Windows
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine global cache directory."
            )
        return Path(user_profile) / ".runtimekit"
    else:  # Linux/macOS
        return Path.home() / ".runtimekit"


def get_tool_cache_dir(
    override: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Get the tool cache root.

    Args:
        override: Explicit directory, takes precedence over everything else
        environ: Environment mapping (default: os.environ)

    Returns:
        Path: override, else $RUNNER_TOOL_CACHE, else ~/.runtimekit/toolcache

    Example:
        >>> get_tool_cache_dir(environ={"RUNNER_TOOL_CACHE": "/opt/hostedtoolcache"})
        PosixPath('/opt/hostedtoolcache')
    """
    if override:
        return Path(override)

    if environ is None:
        environ = os.environ

    from_env = environ.get(TOOL_CACHE_ENV)
    if from_env:
        return Path(from_env)

    return get_global_cache_dir() / "toolcache"


__all__ = [
    "TOOL_CACHE_ENV",
    "DirectoryError",
    "get_global_cache_dir",
    "get_tool_cache_dir",
]
