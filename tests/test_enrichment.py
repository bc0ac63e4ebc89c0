"""Tests for reverse lookups and the DNS probe, without the network."""

import socket

import dns.resolver
import pytest

from netcheck.enrichment import PTRResolver
from netcheck.errors import ProbeError
from netcheck.probe import DnsProbe


NAMES = {
    "10.0.0.1": "gw.example.net",
    "10.0.0.2": "core1.example.net",
}


def fake_gethostbyaddr(address):
    try:
        return NAMES[address], [], [address]
    except KeyError:
        raise socket.herror(1, "Unknown host")


class TestPTRResolver:

    @pytest.mark.asyncio
    async def test_resolve_many(self, monkeypatch):
        monkeypatch.setattr(socket, "gethostbyaddr", fake_gethostbyaddr)

        with PTRResolver() as resolver:
            names = await resolver.resolve_many(["10.0.0.1", "10.0.0.9", "10.0.0.1", ""])

        assert names == {"10.0.0.1": "gw.example.net", "10.0.0.9": None}

    @pytest.mark.asyncio
    async def test_blank_address(self):
        with PTRResolver() as resolver:
            assert await resolver.resolve("") is None
            assert await resolver.resolve_many([]) == {}


class FakeRdata:

    def __init__(self, address=None, target=None):
        self.address = address
        self.target = target


class FakeAnswer(list):

    def __init__(self, items, ttl=300):
        super().__init__(items)
        self.rrset = type("RRset", (), {"ttl": ttl})()


class FakeResolver:
    """Answers from a dict of (name, rdtype) -> answer or exception"""

    def __init__(self, answers):
        self.answers = answers

    def resolve(self, name, rdtype):
        result = self.answers.get((name, rdtype), dns.resolver.NXDOMAIN())
        if isinstance(result, Exception):
            raise result
        return result


class TestDnsProbe:

    @pytest.mark.asyncio
    async def test_resolve_with_nameservers(self):
        probe = DnsProbe()
        probe._resolver = FakeResolver({
            ("www.example.com", "A"): FakeAnswer([FakeRdata(address="93.184.216.34")], ttl=120),
            ("www.example.com", "NS"): dns.resolver.NoAnswer(),
            ("example.com", "NS"): FakeAnswer([FakeRdata(target="ns1.cloudflare.com.")]),
        })

        outcome = await probe.resolve("www.example.com")
        probe.close()

        assert outcome.target == "www.example.com"
        assert outcome.addresses == ("93.184.216.34",)
        assert outcome.ttl == 120
        assert outcome.nameservers == ("ns1.cloudflare.com",)
        assert outcome.cdn == "Cloudflare"
        assert outcome.lookup_ms >= 0

    @pytest.mark.asyncio
    async def test_nxdomain_is_empty_outcome(self):
        probe = DnsProbe()
        probe._resolver = FakeResolver({})

        outcome = await probe.resolve("nonexistent.invalid")
        probe.close()

        assert not outcome.resolved
        assert outcome.ttl is None
        assert outcome.nameservers == ()
        assert outcome.cdn is None

    @pytest.mark.asyncio
    async def test_unreachable_resolver_raises(self):
        probe = DnsProbe()
        probe._resolver = FakeResolver({
            ("example.com", "A"): dns.resolver.NoNameservers(),
        })

        with pytest.raises(ProbeError):
            await probe.resolve("example.com")
        probe.close()
