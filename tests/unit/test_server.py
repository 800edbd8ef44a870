"""
Unit tests for the exposition server and listen address parsing.
"""
import errno
import socket
import unittest
import urllib.error
import urllib.request
from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from puppet_exporter.common.exceptions import ConfigurationError, ListenerBindFailure
from puppet_exporter.monitoring.build_info import register_build_info
from puppet_exporter.monitoring.collector import LastRunCollector
from puppet_exporter.monitoring.server import ExporterServer, parse_listen_address
from tests.conftest import SUMMARY_YAML


class TestParseListenAddress:

    def test_port_only(self):
        assert parse_listen_address(":9309") == ("", 9309)

    def test_host_and_port(self):
        assert parse_listen_address("127.0.0.1:8080") == ("127.0.0.1", 8080)

    def test_hostname(self):
        assert parse_listen_address("localhost:9309") == ("localhost", 9309)

    def test_ipv6(self):
        assert parse_listen_address("[::1]:9309") == ("::1", 9309)

    @pytest.mark.parametrize("address", [
        "9309", "localhost", ":abc", ":70000", "::1:9309", "",
    ])
    def test_invalid(self, address):
        with pytest.raises(ConfigurationError):
            parse_listen_address(address)


class TestExporterServerConfig:

    def test_endpoint_must_be_absolute(self):
        with pytest.raises(ConfigurationError):
            ExporterServer(CollectorRegistry(), ":0", "metrics")

    def test_address_before_bind(self):
        server = ExporterServer(CollectorRegistry(), "127.0.0.1:9400")
        assert server.server_address == ("127.0.0.1", 9400)
        assert not server.is_running

    def test_bind_failure_on_used_port(self):
        blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        port = blocker.getsockname()[1]
        try:
            server = ExporterServer(CollectorRegistry(), f"127.0.0.1:{port}")
            with pytest.raises(ListenerBindFailure) as exc_info:
                server.bind()
            assert f"127.0.0.1:{port}" in str(exc_info.value)
            assert isinstance(exc_info.value.__cause__, OSError)
        finally:
            blocker.close()

    def test_binds_requested_address(self):
        server = ExporterServer(CollectorRegistry(), "127.0.0.1:0")
        server.bind()
        try:
            host, port = server.server_address
            assert host == "127.0.0.1"
            assert port > 0
        finally:
            server.stop()


class TestWildcardListener:
    """An empty host listens on every interface, IPv6 included when available."""

    def _serve(self):
        server = ExporterServer(CollectorRegistry(), ":0")
        server.start()
        return server

    def test_reachable_over_ipv4(self):
        server = self._serve()
        try:
            url = f"http://127.0.0.1:{server.server_address[1]}/metrics"
            assert urllib.request.urlopen(url, timeout=5).status == 200
        finally:
            server.stop()

    def test_reachable_over_ipv6_when_dual_stack(self):
        server = self._serve()
        try:
            if server._server.address_family != socket.AF_INET6:
                pytest.skip("IPv6 unavailable on this host")
            url = f"http://[::1]:{server.server_address[1]}/metrics"
            try:
                status = urllib.request.urlopen(url, timeout=5).status
            except urllib.error.URLError as e:
                pytest.skip(f"no IPv6 loopback: {e.reason}")
            assert status == 200
        finally:
            server.stop()

    def test_falls_back_to_ipv4(self):
        unsupported = OSError(errno.EAFNOSUPPORT, "Address family not supported")
        with patch(
            "puppet_exporter.monitoring.server._MetricsHTTPServerDualStack",
            side_effect=unsupported,
        ):
            server = self._serve()
        try:
            assert server._server.address_family == socket.AF_INET
            url = f"http://127.0.0.1:{server.server_address[1]}/metrics"
            assert urllib.request.urlopen(url, timeout=5).status == 200
        finally:
            server.stop()

    def test_port_in_use_on_ipv4_wildcard(self):
        blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        blocker.bind(("0.0.0.0", 0))
        blocker.listen(1)
        port = blocker.getsockname()[1]
        try:
            with pytest.raises(ListenerBindFailure):
                ExporterServer(CollectorRegistry(), f":{port}").bind()
        finally:
            blocker.close()


class TestExporterServer(unittest.TestCase):
    """Tests for the HTTP surface against a real listener."""

    @classmethod
    def setUpClass(cls):
        import tempfile
        from pathlib import Path

        cls._tmp = tempfile.TemporaryDirectory()
        cls.report_path = Path(cls._tmp.name) / "last_run_summary.yaml"
        cls.report_path.write_text(SUMMARY_YAML)

        registry = CollectorRegistry()
        registry.register(LastRunCollector(cls.report_path))
        register_build_info(registry)

        cls.server = ExporterServer(registry, "127.0.0.1:0", "/probe")
        cls.server.start()
        cls.port = cls.server.server_address[1]

    @classmethod
    def tearDownClass(cls):
        cls.server.stop()
        cls._tmp.cleanup()

    def _get(self, path: str) -> tuple:
        """Make GET request and return (status_code, headers, body)."""
        url = f"http://127.0.0.1:{self.port}{path}"
        try:
            resp = urllib.request.urlopen(url, timeout=5)
            return resp.status, resp.headers, resp.read().decode()
        except urllib.error.HTTPError as e:
            return e.code, e.headers, e.read().decode()

    def test_metrics_endpoint(self):
        status, headers, body = self._get("/probe")
        self.assertEqual(status, 200)
        self.assertTrue(headers["Content-Type"].startswith("text/plain"))
        self.assertIn("puppet_last_run_exporter_ResourcesTotal 12.0", body)
        self.assertIn("puppet_last_run_exporter_build_info{", body)

    def test_query_string_ignored(self):
        status, _, body = self._get("/probe?debug=1")
        self.assertEqual(status, 200)
        self.assertIn("puppet_last_run_exporter_ResourcesChanged 3.0", body)

    def test_unknown_path(self):
        status, _, _ = self._get("/metrics")
        self.assertEqual(status, 404)

    def test_root_path(self):
        status, _, _ = self._get("/")
        self.assertEqual(status, 404)

    def test_server_is_running(self):
        self.assertTrue(self.server.is_running)


class TestMissingReportOverHTTP(unittest.TestCase):
    """A missing file must not take the endpoint down."""

    def setUp(self):
        import tempfile
        from pathlib import Path

        self._tmp = tempfile.TemporaryDirectory()
        self.report_path = Path(self._tmp.name) / "last_run_summary.yaml"
        registry = CollectorRegistry()
        registry.register(LastRunCollector(self.report_path))
        register_build_info(registry)
        self.server = ExporterServer(registry, "127.0.0.1:0")
        self.server.start()
        self.url = f"http://127.0.0.1:{self.server.server_address[1]}/metrics"

    def tearDown(self):
        self.server.stop()
        self._tmp.cleanup()

    def test_missing_then_present(self):
        body = urllib.request.urlopen(self.url, timeout=5).read().decode()
        self.assertNotIn("puppet_last_run_exporter_Resources", body)
        self.assertIn("puppet_last_run_exporter_build_info", body)

        self.report_path.write_text(SUMMARY_YAML)
        body = urllib.request.urlopen(self.url, timeout=5).read().decode()
        self.assertIn("puppet_last_run_exporter_ResourcesFailed 1.0", body)
        self.assertTrue(self.server.is_running)


if __name__ == "__main__":
    unittest.main()
