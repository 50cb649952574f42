"""
Unit tests for the RuntimeInstaller workflow.

Vendor ports are replaced by a stub that records calls, so cache lookup,
remote resolution, download and publishing can be checked in isolation.
"""

import asyncio
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import requests

from runtimekit.core.exceptions import InvalidVersionSpec
from runtimekit.distributions.base import RuntimeInstaller
from runtimekit.distributions.models import (
    InstallerOptions,
    InstallResult,
    ReleaseDescriptor,
)

FOLDER = "Java_temurin_jdk"


class StubInstaller(RuntimeInstaller):
    """Installer whose remote ports are scripted by the test."""

    def __init__(self, options, release=None, resolve_error=None, **kwargs):
        super().__init__("temurin", options, **kwargs)
        self.release = release
        self.resolve_error = resolve_error
        self.resolved_ranges = []
        self.downloaded = []

    async def find_package_for_download(self, version_range):
        self.resolved_ranges.append(version_range)
        if self.resolve_error is not None:
            raise self.resolve_error
        if self.release is None:
            raise AssertionError("remote resolution must not be called")
        return self.release

    async def download_tool(self, release):
        self.downloaded.append(release)
        token = self.cache_version_name(release.version)
        path = self.tool_cache.root / self.tool_cache_folder_name / token / self.architecture
        path.mkdir(parents=True)
        return InstallResult(version=release.version, path=path)


@pytest.fixture
def make_installer(tool_cache, publisher, linux_x64):
    def _make(version="11", check_latest=False, architecture="x64", **kwargs):
        kwargs.setdefault("platform_info", linux_x64)
        options = InstallerOptions(
            version=version, architecture=architecture, check_latest=check_latest
        )
        return StubInstaller(
            options, tool_cache=tool_cache, publisher=publisher, **kwargs
        )

    return _make


@pytest.fixture
def populated_cache(add_cache_entry):
    """Cache with stable 11.0.1, 11.0.3, early-access 11.0.3 and 17.0.0+1."""
    return {
        "11.0.1": add_cache_entry(FOLDER, "11.0.1"),
        "11.0.3": add_cache_entry(FOLDER, "11.0.3"),
        "11.0.3-ea": add_cache_entry(FOLDER, "11.0.3-ea"),
        "17.0.0-ea.1": add_cache_entry(FOLDER, "17.0.0-ea.1"),
    }


class TestConstruction:
    """Test option handling at construction."""

    def test_normalizes_early_access(self, make_installer):
        installer = make_installer(version="11.0.3-ea.2")

        assert installer.version == "11.0.3+2"
        assert installer.stable is False

    def test_invalid_version(self, make_installer):
        with pytest.raises(InvalidVersionSpec):
            make_installer(version="not-a-version")

    def test_architecture_defaults_to_host(self, make_installer, linux_x64):
        installer = make_installer(architecture="")

        assert installer.architecture == linux_x64.arch

    def test_tool_cache_folder_name(self, make_installer):
        assert make_installer().tool_cache_folder_name == "Java_temurin_jdk"

    def test_distribution_architecture(self, make_installer):
        assert make_installer(architecture="arm64").distribution_architecture() == "aarch64"


class TestFindInToolCache:
    """Test cache selection."""

    def test_highest_stable_match(self, make_installer, populated_cache):
        found = make_installer(version="11").find_in_tool_cache()

        assert found == InstallResult("11.0.3", populated_cache["11.0.3"])

    def test_early_access_match(self, make_installer, populated_cache):
        found = make_installer(version="17-ea").find_in_tool_cache()

        assert found == InstallResult("17.0.0+1", populated_cache["17.0.0-ea.1"])

    def test_early_access_ignores_stable(self, make_installer, populated_cache):
        found = make_installer(version="11-ea").find_in_tool_cache()

        assert found == InstallResult("11.0.3", populated_cache["11.0.3-ea"])

    def test_stable_request_ignores_early_access(self, make_installer, populated_cache):
        assert make_installer(version="17").find_in_tool_cache() is None

    def test_empty_cache(self, make_installer):
        assert make_installer(version="11").find_in_tool_cache() is None

    def test_build_aware_ordering(self, make_installer, add_cache_entry):
        add_cache_entry(FOLDER, "11.0.3-2")
        newest = add_cache_entry(FOLDER, "11.0.3-10")

        found = make_installer(version="11").find_in_tool_cache()

        assert found == InstallResult("11.0.3+10", newest)

    def test_exact_build_request(self, make_installer, add_cache_entry):
        wanted = add_cache_entry(FOLDER, "11.0.3-2")
        add_cache_entry(FOLDER, "11.0.3-10")

        found = make_installer(version="11.0.3+2").find_in_tool_cache()

        assert found == InstallResult("11.0.3+2", wanted)

    def test_other_architecture_ignored(self, make_installer, add_cache_entry):
        add_cache_entry(FOLDER, "11.0.3", arch="aarch64")

        assert make_installer(version="11").find_in_tool_cache() is None

    def test_entry_without_path_skipped(self, make_installer, add_cache_entry, tool_cache):
        add_cache_entry(FOLDER, "11.0.3")
        installer = make_installer(version="11")
        tool_cache.find_path = lambda folder, token, arch: None

        assert installer.find_in_tool_cache() is None


class TestSetup:
    """Test the setup workflow."""

    def test_cache_hit_skips_remote(self, make_installer, populated_cache):
        installer = make_installer(version="11")

        result = asyncio.run(installer.setup())

        assert result == InstallResult("11.0.3", populated_cache["11.0.3"])
        assert installer.resolved_ranges == []
        assert installer.downloaded == []

    def test_cache_miss_downloads(self, make_installer, tool_cache):
        release = ReleaseDescriptor("17.0.2+8", "https://cdn.example.com/jdk-17.tar.gz")
        installer = make_installer(version="17", release=release)

        result = asyncio.run(installer.setup())

        assert installer.resolved_ranges == ["17"]
        assert installer.downloaded == [release]
        assert result.version == "17.0.2+8"
        assert result.path == tool_cache.root / FOLDER / "17.0.2-8" / "x64"

    def test_check_latest_already_current(self, make_installer, populated_cache):
        release = ReleaseDescriptor("11.0.3", "https://cdn.example.com/jdk-11.tar.gz")
        installer = make_installer(version="11", check_latest=True, release=release)

        result = asyncio.run(installer.setup())

        assert installer.resolved_ranges == ["11"]
        assert installer.downloaded == []
        assert result == InstallResult("11.0.3", populated_cache["11.0.3"])

    def test_check_latest_newer_release(self, make_installer, populated_cache):
        release = ReleaseDescriptor("11.0.4", "https://cdn.example.com/jdk-11.tar.gz")
        installer = make_installer(version="11", check_latest=True, release=release)

        result = asyncio.run(installer.setup())

        assert installer.downloaded == [release]
        assert result.version == "11.0.4"

    def test_remote_failure_reraised_unchanged(self, make_installer, caplog):
        response = requests.Response()
        response.status_code = 429
        error = requests.HTTPError("429 Too Many Requests", response=response)
        installer = make_installer(version="17", resolve_error=error)

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(requests.HTTPError) as exc_info:
                asyncio.run(installer.setup())

        assert exc_info.value is error
        assert "HTTP 429: Rate limit exceeded" in caplog.text
        assert installer.downloaded == []

    def test_aggregate_failure_logged(self, make_installer, caplog):
        error = ExceptionGroup(
            "all endpoints failed",
            [TimeoutError(110, "timed out"), TimeoutError(110, "timed out")],
        )
        installer = make_installer(version="17", resolve_error=error)

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(ExceptionGroup) as exc_info:
                asyncio.run(installer.setup())

        assert exc_info.value is error
        assert "Sub-error 2:" in caplog.text

    def test_original_error_survives_diagnostics_failure(self, make_installer, caplog):
        error = requests.ConnectionError("connection aborted")
        installer = make_installer(version="17", resolve_error=error)

        with patch(
            "runtimekit.distributions.base.classify",
            side_effect=ValueError("Port could not be cast to integer value"),
        ):
            with pytest.raises(requests.ConnectionError) as exc_info:
                asyncio.run(installer.setup())

        assert exc_info.value is error
        assert "connection aborted" in caplog.text

    def test_failure_publishes_nothing(self, make_installer, publisher):
        installer = make_installer(version="17", resolve_error=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            asyncio.run(installer.setup())

        assert publisher.variables == {}
        assert publisher.outputs == {}


class TestPathCorrection:
    """Test macOS bundle layout handling."""

    def test_macos_bundle_home(self, make_installer, add_cache_entry, macos_x64):
        install_dir = add_cache_entry(FOLDER, "17.0.2")
        (install_dir / "Contents" / "Home").mkdir(parents=True)
        installer = make_installer(version="17", platform_info=macos_x64)

        result = asyncio.run(installer.setup())

        assert result.path == install_dir / "Contents" / "Home"

    def test_macos_without_bundle(self, make_installer, add_cache_entry, macos_x64):
        install_dir = add_cache_entry(FOLDER, "17.0.2")
        installer = make_installer(version="17", platform_info=macos_x64)

        assert asyncio.run(installer.setup()).path == install_dir

    def test_linux_ignores_bundle_layout(self, make_installer, add_cache_entry):
        install_dir = add_cache_entry(FOLDER, "17.0.2")
        (install_dir / "Contents" / "Home").mkdir(parents=True)

        assert asyncio.run(make_installer(version="17").setup()).path == install_dir


class TestPublish:
    """Test environment publishing."""

    def test_publishes_environment_and_outputs(self, make_installer, add_cache_entry, publisher):
        install_dir = add_cache_entry(FOLDER, "17.0.2-8")

        asyncio.run(make_installer(version="17").setup())

        assert publisher.variables == {
            "JAVA_HOME": str(install_dir),
            "JAVA_HOME_17_X64": str(install_dir),
        }
        assert publisher.paths == [str(Path(install_dir) / "bin")]
        assert publisher.outputs == {
            "distribution": "temurin",
            "path": str(install_dir),
            "version": "17.0.2+8",
        }

    def test_architecture_in_variable_name(self, make_installer, add_cache_entry, publisher):
        add_cache_entry(FOLDER, "21.0.1", arch="aarch64")

        asyncio.run(make_installer(version="21", architecture="aarch64").setup())

        assert "JAVA_HOME_21_AARCH64" in publisher.variables
