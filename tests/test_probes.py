"""Unit tests for the concrete probes (no network)."""

import httpx
import pytest

from netcheck.errors import ProbeError
from netcheck.models import NO_RESPONSE
from netcheck.probe import PathProbe, StabilityProbe, detect_cdn, parse_traceroute
from netcheck.probe.http_probe import HttpTimingProbe, PhaseClock, build_transport_outcome


class TestDetectCdn:

    @pytest.mark.parametrize("nameservers,expected", [
        (["ns1.cloudflare.com"], "Cloudflare"),
        (["ns-1.awsdns-01.org"], "AWS Route53"),
        (["a1-64.akam.net", "ns1-2.akamaitech.net"], "Akamai"),
        (["ns1.fastly.net"], "Fastly"),
        (["ns1-01.azure-dns.com"], "Azure"),
        (["ns-cloud-a1.googledomains.com"], "Google Cloud"),
        (["NS1.CLOUDFLARE.COM"], "Cloudflare"),
    ])
    def test_known_providers(self, nameservers, expected):
        assert detect_cdn(nameservers) == expected

    def test_unknown_or_missing(self):
        assert detect_cdn(["a.iana-servers.net"]) is None
        assert detect_cdn([]) is None
        assert detect_cdn(None) is None


TRACEROUTE_OUTPUT = """\
traceroute to example.com (93.184.216.34), 15 hops max, 60 byte packets
 1  192.168.1.1  1.234 ms
 2  *
 3  10.20.30.1  12.5 ms
 4  2001:db8::1  20.75 ms
"""


class TestParseTraceroute:

    def test_hops(self):
        hops = parse_traceroute(TRACEROUTE_OUTPUT)

        assert [hop.index for hop in hops] == [1, 2, 3, 4]
        assert hops[0].address == "192.168.1.1"
        assert hops[0].rtt_ms == 1.234
        assert hops[0].loss_percent == 0.0
        assert hops[3].address == "2001:db8::1"
        assert hops[3].rtt_ms == 20.75

    def test_unanswered_hop(self):
        hop = parse_traceroute(TRACEROUTE_OUTPUT)[1]

        assert hop.address == NO_RESPONSE
        assert not hop.responded
        assert hop.rtt_ms == 0.0
        assert hop.loss_percent == 100.0

    def test_banner_only(self):
        assert parse_traceroute("traceroute to x (1.2.3.4), 15 hops max\n") == []
        assert parse_traceroute("") == []


class TestBuildTransportOutcome:

    def test_cumulative_timings(self):
        marks = {'connect': 30.0, 'secure_channel': 80.0, 'first_byte': 150.0}
        outcome = build_transport_outcome(10.0, marks, 200.0, response_code=200, body_bytes=5000)

        assert outcome.lookup_ms == 10.0
        assert outcome.connect_ms == 40.0
        assert outcome.secure_channel_ms == 90.0
        assert outcome.first_byte_ms == 160.0
        assert outcome.total_ms == 210.0
        assert outcome.response_code == 200
        # 40 kbit over 0.2 s
        assert outcome.throughput_kbps == 200.0
        assert outcome.timings_monotonic

    def test_plain_http_has_no_secure_channel_cost(self):
        marks = {'connect': 30.0, 'first_byte': 100.0}
        outcome = build_transport_outcome(10.0, marks, 120.0, response_code=200)

        assert outcome.secure_channel_ms == outcome.connect_ms == 40.0
        assert outcome.secure_channel_only_ms == 0.0

    def test_nothing_happened(self):
        outcome = build_transport_outcome(0.0, {}, 0.0)

        assert outcome.connect_ms == 0.0
        assert outcome.secure_channel_ms == 0.0
        assert outcome.first_byte_ms == 0.0
        assert outcome.total_ms == 0.0
        assert outcome.response_code == 0
        assert outcome.throughput_kbps == 0.0
        assert not outcome.responded


class TestPhaseClock:

    @pytest.mark.asyncio
    async def test_first_occurrence_only(self):
        clock = PhaseClock()
        await clock.trace("connection.connect_tcp.complete", {})
        first = clock.marks['connect']
        await clock.trace("connection.connect_tcp.complete", {})

        assert clock.marks['connect'] == first

    @pytest.mark.asyncio
    async def test_ignores_marks_after_first_byte(self):
        clock = PhaseClock()
        await clock.trace("http11.receive_response_headers.complete", {})
        await clock.trace("connection.start_tls.complete", {})

        assert 'first_byte' in clock.marks
        assert 'secure_channel' not in clock.marks

    @pytest.mark.asyncio
    async def test_unrelated_events(self):
        clock = PhaseClock()
        await clock.trace("connection.connect_tcp.started", {})
        assert clock.marks == {}


class TestHttpTimingProbe:

    @pytest.mark.asyncio
    async def test_response_code_and_throughput(self, monkeypatch):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"x" * 1000))
        probe = HttpTimingProbe(transport=transport)

        async def fake_lookup(host, port):
            return 5.0
        monkeypatch.setattr(probe, "_lookup", fake_lookup)

        outcome = await probe.time_connection("https://example.com")

        assert outcome.response_code == 200
        assert outcome.lookup_ms == 5.0
        assert outcome.first_byte_ms > 0
        assert outcome.total_ms >= outcome.first_byte_ms
        assert outcome.throughput_kbps > 0

    @pytest.mark.asyncio
    async def test_connection_error_gives_code_zero(self, monkeypatch):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        probe = HttpTimingProbe(transport=httpx.MockTransport(refuse))

        async def fake_lookup(host, port):
            return 5.0
        monkeypatch.setattr(probe, "_lookup", fake_lookup)

        outcome = await probe.time_connection("https://example.com")

        assert outcome.response_code == 0
        assert not outcome.responded
        assert outcome.first_byte_ms == 0.0

    @pytest.mark.asyncio
    async def test_lookup_failure(self, monkeypatch):
        probe = HttpTimingProbe(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        async def no_lookup(host, port):
            return None
        monkeypatch.setattr(probe, "_lookup", no_lookup)

        outcome = await probe.time_connection("https://nonexistent.invalid")

        assert outcome.response_code == 0
        assert outcome.total_ms == 0.0


class TestStabilityProbe:

    @pytest.mark.asyncio
    async def test_all_succeed(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200)

        probe = StabilityProbe(interval=0, transport=httpx.MockTransport(handler))
        outcome = await probe.sample("example.com", 5)

        assert len(requests) == 5
        assert requests[0].url.scheme == "https"
        assert requests[0].url.host == "example.com"
        assert outcome.sample_count == 5
        assert outcome.successful == 5
        assert outcome.success_rate == 100.0

    @pytest.mark.asyncio
    async def test_mixed_results(self):
        responses = iter([200, 301, 500, 404, None])

        def handler(request):
            code = next(responses)
            if code is None:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(code)

        probe = StabilityProbe(interval=0, transport=httpx.MockTransport(handler))
        outcome = await probe.sample("example.com", 5)

        assert outcome.successful == 2
        assert outcome.success_rate == 40.0

    @pytest.mark.asyncio
    async def test_no_success(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        probe = StabilityProbe(interval=0, transport=httpx.MockTransport(handler))
        outcome = await probe.sample("example.com", 3)

        assert outcome.successful == 0
        assert outcome.success_rate == 0.0
        assert outcome.avg_ms == 0.0
        assert outcome.jitter_ms == 0.0


class TestPathProbe:

    def test_arguments(self):
        probe = PathProbe(max_hops=20, wait=2.0)
        assert probe._args("example.com") == [
            'traceroute', '-n', '-m', '20', '-w', '2', '-q', '1', 'example.com',
        ]

    @pytest.mark.asyncio
    async def test_missing_command(self):
        probe = PathProbe(command='netcheck-no-such-traceroute')

        with pytest.raises(ProbeError, match="not installed"):
            await probe.trace("example.com", "93.184.216.34")

    @pytest.mark.asyncio
    async def test_trace_parses_output(self, monkeypatch):
        probe = PathProbe()

        async def fake_run(hostname):
            return TRACEROUTE_OUTPUT
        monkeypatch.setattr(probe, "_run", fake_run)

        outcome = await probe.trace("example.com", "93.184.216.34")

        assert outcome.target_address == "93.184.216.34"
        assert outcome.total_hops == 4
        assert outcome.unresponsive_hops == 1
        assert all(hop.hostname is None for hop in outcome.hops)
