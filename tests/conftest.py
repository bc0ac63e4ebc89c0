"""Shared fixtures and fakes for NetCheck tests."""

import asyncio

import pytest

from netcheck.models import (
    PathHop,
    PathTraceOutcome,
    ResolutionOutcome,
    StabilityOutcome,
    TransportOutcome,
)
from netcheck.probe.base import Prober
from netcheck.progress import EventLog


def good_resolution(hostname="example.com"):
    return ResolutionOutcome(
        target=hostname,
        addresses=("93.184.216.34", "93.184.216.35"),
        lookup_ms=50.0,
        ttl=300,
        nameservers=("a.iana-servers.net", "b.iana-servers.net"),
    )


def good_transport(total_ms=400.0, response_code=200):
    return TransportOutcome(
        lookup_ms=20.0,
        connect_ms=60.0,
        secure_channel_ms=120.0,
        first_byte_ms=200.0,
        total_ms=total_ms,
        response_code=response_code,
        throughput_kbps=800.0,
    )


def good_path(target_address="93.184.216.34"):
    hops = tuple(
        PathHop(index=i, address=f"10.0.0.{i}", rtt_ms=float(i), loss_percent=0.0)
        for i in range(1, 6)
    )
    return PathTraceOutcome(target_address=target_address, hops=hops, total_hops=5, elapsed_ms=900.0)


def good_stability():
    return StabilityOutcome.from_samples(10, [100.0] * 10)


class FakeProber(Prober):
    """
    Prober returning canned outcomes.

    Each result may be an outcome, an exception instance (raised), and
    each probe may be delayed by a number of seconds.
    """

    def __init__(self, resolution=None, transport=None, path=None, stability=None, delays=None):
        self.results = {
            'resolve': resolution if resolution is not None else good_resolution(),
            'time_connection': transport if transport is not None else good_transport(),
            'trace_path': path if path is not None else good_path(),
            'sample_stability': stability if stability is not None else good_stability(),
        }
        self.delays = delays or {}
        self.calls = []
        self.closed = False

    async def _answer(self, name, *args):
        self.calls.append((name, args))
        delay = self.delays.get(name, 0)
        if delay:
            await asyncio.sleep(delay)
        result = self.results[name]
        if isinstance(result, BaseException):
            raise result
        return result

    async def resolve(self, hostname):
        return await self._answer('resolve', hostname)

    async def time_connection(self, url):
        return await self._answer('time_connection', url)

    async def trace_path(self, hostname, target_address):
        return await self._answer('trace_path', hostname, target_address)

    async def sample_stability(self, hostname, sample_count):
        return await self._answer('sample_stability', hostname, sample_count)

    async def close(self):
        self.closed = True


@pytest.fixture
def sink():
    return EventLog()
