"""
Prober backed by real network probes
"""

from ..config import RunConfig
from ..models import (
    PathTraceOutcome,
    ResolutionOutcome,
    StabilityOutcome,
    TransportOutcome,
)
from .base import Prober
from .dns_probe import DnsProbe
from .http_probe import HttpTimingProbe, StabilityProbe
from .path_probe import PathProbe


class NetworkProber(Prober):
    """
    Prober that talks to the network.
    
    Resolution uses dnspython, connection timing and stability sampling
    use httpx, path tracing runs the system traceroute.
    """
    
    def __init__(self, config: RunConfig = RunConfig()):
        self.config = config
        self._dns = DnsProbe(timeout=config.resolution_timeout)
        self._http = HttpTimingProbe(
            connect_timeout=config.connect_timeout,
            max_time=config.probe_timeout,
        )
        self._stability = StabilityProbe(interval=config.sample_interval)
        self._path = PathProbe(
            max_hops=config.max_hops,
            resolve_names=config.resolve_hop_names,
        )
    
    async def resolve(self, hostname: str) -> ResolutionOutcome:
        return await self._dns.resolve(hostname)
    
    async def time_connection(self, url: str) -> TransportOutcome:
        return await self._http.time_connection(url)
    
    async def trace_path(self, hostname: str, target_address: str) -> PathTraceOutcome:
        return await self._path.trace(hostname, target_address)
    
    async def sample_stability(self, hostname: str, sample_count: int) -> StabilityOutcome:
        return await self._stability.sample(hostname, sample_count)
    
    async def close(self):
        self._dns.close()
