"""Unit tests for target parsing and report assembly."""

from datetime import datetime, timedelta, timezone

import pytest

from netcheck.diagnostics import Diagnostics
from netcheck.errors import InvalidTargetError
from netcheck.models import DiagnosticSnapshot, OverallStatus, Target
from netcheck.report import assemble_report, format_timestamp, parse_target

from .conftest import good_resolution, good_transport


class TestParseTarget:

    def test_bare_host(self):
        target = parse_target("example.com")
        assert target == Target(hostname="example.com", url="https://example.com")

    def test_surrounding_whitespace(self):
        target = parse_target("  example.com \n")
        assert target.hostname == "example.com"
        assert target.raw == "example.com"

    def test_http_url_kept(self):
        target = parse_target("http://example.com")
        assert target.hostname == "example.com"
        assert target.url == "http://example.com"

    def test_port_and_path(self):
        target = parse_target("https://example.com:8443/status?x=1")
        assert target.hostname == "example.com"
        assert target.url == "https://example.com:8443/status?x=1"

    def test_bare_host_with_path(self):
        target = parse_target("example.com/health")
        assert target.hostname == "example.com"
        assert target.url == "https://example.com/health"

    def test_scheme_is_case_insensitive(self):
        target = parse_target("HTTPS://Example.com/x")
        assert target.hostname == "example.com"
        assert target.url == "https://Example.com/x"

    def test_url_in_query_is_not_a_scheme(self):
        target = parse_target("example.com/go?next=http://other.example")
        assert target.hostname == "example.com"
        assert target.url == "https://example.com/go?next=http://other.example"

    @pytest.mark.parametrize("value", ["ftp://example.com", "ws://example.com/socket", "FILE:///etc/hosts"])
    def test_unsupported_scheme(self, value):
        with pytest.raises(InvalidTargetError, match="Unsupported scheme"):
            parse_target(value)

    @pytest.mark.parametrize("value", ["", "   ", "https://", None])
    def test_no_host(self, value):
        with pytest.raises(InvalidTargetError):
            parse_target(value)

    def test_invalid_target_is_value_error(self):
        with pytest.raises(ValueError):
            parse_target("")


class TestTimestamp:

    def test_format(self):
        now = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)
        assert format_timestamp(now) == "2024-03-05 07:08:09 UTC"

    def test_converts_to_utc(self):
        now = datetime(2024, 3, 5, 9, 8, 9, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(now) == "2024-03-05 07:08:09 UTC"

    def test_default_now(self):
        assert format_timestamp().endswith(" UTC")


class TestAssembleReport:

    def test_fields_copied(self):
        snapshot = DiagnosticSnapshot(resolution=good_resolution(), transport=good_transport())
        analysis = Diagnostics().evaluate(snapshot)
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)

        report = assemble_report(parse_target("example.com"), snapshot, analysis, now=now)

        assert report.target == "https://example.com"
        assert report.timestamp == "2024-01-01 00:00:00 UTC"
        assert report.resolution is snapshot.resolution
        assert report.transport is snapshot.transport
        assert report.path is None
        assert report.stability is None
        assert report.status == analysis.status == OverallStatus.EXCELLENT
        assert report.score == analysis.score
        assert report.issues == analysis.issues
        assert report.recommendations == analysis.recommendations
