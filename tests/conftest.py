"""
Pytest configuration and shared fixtures for RuntimeKit tests.
"""

from pathlib import Path

import pytest

from runtimekit.core.platform import PlatformInfo
from runtimekit.core.publisher import EnvironmentPublisher
from runtimekit.core.tool_cache import ToolCache


class RecordingPublisher(EnvironmentPublisher):
    """Publisher that records calls instead of touching the process."""

    def __init__(self):
        self.variables = {}
        self.paths = []
        self.outputs = {}

    def set_variable(self, name: str, value: str) -> None:
        self.variables[name] = value

    def prepend_path(self, directory: str) -> None:
        self.paths.insert(0, directory)

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value


@pytest.fixture
def publisher() -> RecordingPublisher:
    """Recording environment publisher."""
    return RecordingPublisher()


@pytest.fixture
def tool_cache(tmp_path) -> ToolCache:
    """Empty tool cache rooted in a temporary directory."""
    return ToolCache(tmp_path / "toolcache")


@pytest.fixture
def linux_x64() -> PlatformInfo:
    return PlatformInfo(os="linux", arch="x64")


@pytest.fixture
def macos_x64() -> PlatformInfo:
    return PlatformInfo(os="macos", arch="x64")


@pytest.fixture
def add_cache_entry(tool_cache):
    """
    Factory creating a complete tool cache entry.

    Example:
        def test_lookup(add_cache_entry):
            path = add_cache_entry("Java_temurin_jdk", "11.0.3", "x64")
    """

    def _add(folder: str, token: str, arch: str = "x64", complete: bool = True) -> Path:
        install_dir = tool_cache.root / folder / token / arch
        (install_dir / "bin").mkdir(parents=True)
        if complete:
            (tool_cache.root / folder / token / f"{arch}.complete").write_text("")
        return install_dir

    return _add
