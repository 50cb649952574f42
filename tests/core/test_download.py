"""
Unit tests for the network transport.

Tests download functionality with mocked network requests.
"""

import hashlib
from unittest.mock import patch

import pytest
import requests
import responses

from runtimekit.core.download import (
    ChecksumError,
    DownloadProgress,
    StreamingHasher,
    download_file,
    fetch_json,
)

ARCHIVE_URL = "https://cdn.example.com/jdk-17.tar.gz"
MANIFEST_URL = "https://api.example.com/releases.json"


class TestStreamingHasher:
    """Test StreamingHasher class."""

    def test_update_and_finalize(self):
        hasher = StreamingHasher("sha256")
        hasher.update(b"hello ")
        hasher.update(b"world")

        assert hasher.finalize() == hashlib.sha256(b"hello world").hexdigest()

    def test_case_insensitive_verify(self):
        hasher = StreamingHasher("sha256")
        hasher.update(b"test")

        assert hasher.verify(hashlib.sha256(b"test").hexdigest().upper()) is True

    def test_unsupported_algorithm(self):
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            StreamingHasher("md5")


class TestDownloadProgress:
    def test_progress_to_string(self):
        progress = DownloadProgress(
            bytes_downloaded=52428800,
            total_bytes=104857600,
            percentage=50.0,
            speed_bps=1048576,
        )

        assert str(progress) == "50.0/100.0 MB (50.0%) at 1.0 MB/s"


class TestDownloadFile:
    """Test download_file()."""

    @responses.activate
    def test_download_with_checksum(self, tmp_path):
        content = b"archive bytes"
        responses.add(responses.GET, ARCHIVE_URL, body=content, status=200)

        destination = download_file(
            ARCHIVE_URL,
            tmp_path / "jdk.tar.gz",
            expected_sha256=hashlib.sha256(content).hexdigest(),
        )

        assert destination.read_bytes() == content

    @responses.activate
    def test_progress_reports_completion(self, tmp_path):
        content = b"x" * 20000
        responses.add(responses.GET, ARCHIVE_URL, body=content, status=200)
        updates = []

        download_file(ARCHIVE_URL, tmp_path / "jdk.tar.gz", progress_callback=updates.append)

        assert updates
        assert updates[-1].bytes_downloaded == len(content)
        assert all(isinstance(update, DownloadProgress) for update in updates)

    @responses.activate
    def test_checksum_mismatch(self, tmp_path):
        responses.add(responses.GET, ARCHIVE_URL, body=b"tampered", status=200)

        with pytest.raises(ChecksumError, match="Checksum mismatch"):
            download_file(ARCHIVE_URL, tmp_path / "jdk.tar.gz", expected_sha256="a" * 64)

        assert not (tmp_path / "jdk.tar.gz").exists()

    @responses.activate
    def test_http_error_not_retried(self, tmp_path):
        """Test HTTP errors are raised unchanged on the first attempt."""
        responses.add(responses.GET, ARCHIVE_URL, status=404)

        with pytest.raises(requests.HTTPError) as exc_info:
            download_file(ARCHIVE_URL, tmp_path / "jdk.tar.gz")

        assert exc_info.value.response.status_code == 404
        assert len(responses.calls) == 1

    @responses.activate
    def test_connection_error_retried_then_raised(self, tmp_path):
        error = requests.ConnectionError("refused")
        responses.add(responses.GET, ARCHIVE_URL, body=error)

        with patch("runtimekit.core.download.time.sleep") as mock_sleep:
            with pytest.raises(requests.ConnectionError) as exc_info:
                download_file(ARCHIVE_URL, tmp_path / "jdk.tar.gz", max_retries=3)

        assert exc_info.value is error
        assert len(responses.calls) == 3
        assert mock_sleep.call_count == 2

    @responses.activate
    def test_recovers_after_timeout(self, tmp_path):
        responses.add(responses.GET, ARCHIVE_URL, body=requests.Timeout("slow"))
        responses.add(responses.GET, ARCHIVE_URL, body=b"ok", status=200)

        with patch("runtimekit.core.download.time.sleep"):
            destination = download_file(ARCHIVE_URL, tmp_path / "jdk.tar.gz")

        assert destination.read_bytes() == b"ok"

    def test_empty_url(self, tmp_path):
        with pytest.raises(ValueError, match="URL cannot be empty"):
            download_file("", tmp_path / "x")


class TestFetchJson:
    """Test fetch_json()."""

    @responses.activate
    def test_fetch(self):
        responses.add(responses.GET, MANIFEST_URL, json={"releases": []}, status=200)

        assert fetch_json(MANIFEST_URL) == {"releases": []}

    @responses.activate
    def test_rate_limited(self):
        responses.add(responses.GET, MANIFEST_URL, status=429)

        with pytest.raises(requests.HTTPError) as exc_info:
            fetch_json(MANIFEST_URL)

        assert exc_info.value.response.status_code == 429
