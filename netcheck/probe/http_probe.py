"""
HTTP(S) timing and stability probes via httpx
"""

import asyncio
import logging
import socket
import time
from typing import Optional

import httpx

from ..models import StabilityOutcome, TransportOutcome


logger = logging.getLogger(__name__)


# httpcore trace event suffix -> phase name
TRACE_MARKS = (
    ('connect_tcp.complete', 'connect'),
    ('start_tls.complete', 'secure_channel'),
    ('receive_response_headers.complete', 'first_byte'),
)

USER_AGENT = "netcheck"


class PhaseClock:
    """
    Collects phase timestamps from the httpx trace extension.
    
    Times are milliseconds since the clock was created. Only the first
    connection is timed; marks after the first response headers arrive
    (redirect hops) are ignored.
    """
    
    def __init__(self):
        self._start = time.perf_counter()
        self.marks: dict[str, float] = {}
    
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000
    
    def mark(self, phase: str):
        if 'first_byte' in self.marks:
            return
        self.marks.setdefault(phase, self.elapsed_ms())
    
    async def trace(self, event_name: str, info: dict):
        for suffix, phase in TRACE_MARKS:
            if event_name.endswith(suffix):
                self.mark(phase)
                break


def build_transport_outcome(
    lookup_ms: float,
    marks: dict[str, float],
    total_ms: float,
    response_code: int = 0,
    body_bytes: int = 0,
) -> TransportOutcome:
    """
    Turn a lookup time plus request phase marks into cumulative timings.
    
    Args:
        lookup_ms: Name lookup time measured before the request
        marks: Phase marks relative to request start (see PhaseClock)
        total_ms: Request duration, redirects included
        response_code: Final status code, 0 if nothing came back
        body_bytes: Size of the final response body
    
    Returns:
        TransportOutcome. Phases that never happened are 0, except a
        missing TLS phase on a live connection, which equals the connect
        time (plain HTTP has no secure-channel cost).
    """
    connect = marks.get('connect')
    connect_ms = lookup_ms + connect if connect is not None else 0.0
    
    secure = marks.get('secure_channel')
    if secure is not None:
        secure_ms = lookup_ms + secure
    elif connect is not None:
        secure_ms = connect_ms
    else:
        secure_ms = 0.0
    
    first_byte = marks.get('first_byte')
    first_byte_ms = lookup_ms + first_byte if first_byte is not None else 0.0
    
    total = lookup_ms + total_ms
    throughput = (body_bytes * 8 / 1000) / (total_ms / 1000) if total_ms > 0 else 0.0
    
    return TransportOutcome(
        lookup_ms=round(lookup_ms, 2),
        connect_ms=round(connect_ms, 2),
        secure_channel_ms=round(secure_ms, 2),
        first_byte_ms=round(first_byte_ms, 2),
        total_ms=round(total, 2),
        response_code=response_code,
        throughput_kbps=round(throughput, 2),
    )


class HttpTimingProbe:
    """
    Times one GET request, following redirects.
    
    Connection failures are not raised: the outcome carries response
    code 0 and whatever phases completed.
    """
    
    def __init__(self, connect_timeout: float = 10.0, max_time: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.connect_timeout = connect_timeout
        self.max_time = max_time
        self._transport = transport
    
    def _client(self, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(self.max_time, connect=self.connect_timeout),
            headers={'User-Agent': USER_AGENT},
            **kwargs
        )
    
    async def _lookup(self, host: str, port: int) -> Optional[float]:
        """Time name lookup; None if the name does not resolve"""
        loop = asyncio.get_running_loop()
        start = time.perf_counter()
        try:
            await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except socket.gaierror:
            return None
        return (time.perf_counter() - start) * 1000
    
    async def time_connection(self, url: str) -> TransportOutcome:
        """
        Time a request to url.
        
        The name is looked up once here for lookup_ms and again by httpx
        when it connects, so connect_ms also carries a (usually cached)
        second lookup.
        
        Args:
            url: Absolute http(s) URL
        
        Returns:
            TransportOutcome with cumulative phase timings
        """
        parsed = httpx.URL(url)
        port = parsed.port or (443 if parsed.scheme == 'https' else 80)
        
        lookup_ms = await self._lookup(parsed.host, port)
        if lookup_ms is None:
            logger.debug("Name lookup failed for %s", parsed.host)
            return build_transport_outcome(0.0, {}, 0.0)
        
        clock = PhaseClock()
        response_code = 0
        body_bytes = 0
        
        async with self._client(follow_redirects=True) as client:
            try:
                response = await client.get(url, extensions={'trace': clock.trace})
                response_code = response.status_code
                body_bytes = len(response.content)
            except httpx.HTTPError as e:
                logger.debug("Request to %s failed: %s", url, e)
        
        total_ms = clock.elapsed_ms()
        if response_code and 'first_byte' not in clock.marks:
            clock.marks['first_byte'] = total_ms
        
        return build_transport_outcome(lookup_ms, clock.marks, total_ms, response_code, body_bytes)


class StabilityProbe:
    """
    Repeated-request sampler.
    
    Sends sequential GETs without connection reuse so every sample pays
    the full connection cost. A sample succeeds on any 2xx/3xx status.
    """
    
    def __init__(self, interval: float = 0.1, connect_timeout: float = 5.0,
                 max_time: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.interval = interval
        self.connect_timeout = connect_timeout
        self.max_time = max_time
        self._transport = transport
    
    async def _sample(self, client: httpx.AsyncClient, url: str) -> Optional[float]:
        """One request; returns latency in ms on success"""
        start = time.perf_counter()
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            logger.debug("Stability sample to %s failed: %s", url, e)
            return None
        
        elapsed = (time.perf_counter() - start) * 1000
        if 200 <= response.status_code < 400:
            return elapsed
        return None
    
    async def sample(self, hostname: str, sample_count: int) -> StabilityOutcome:
        """
        Run sample_count requests against https://hostname.
        
        Args:
            hostname: Bare host name
            sample_count: Number of requests
        
        Returns:
            StabilityOutcome summarizing the successful samples
        """
        url = f"https://{hostname}"
        latencies: list[float] = []
        
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(self.max_time, connect=self.connect_timeout),
            limits=httpx.Limits(max_keepalive_connections=0),
            headers={'User-Agent': USER_AGENT},
        ) as client:
            for i in range(sample_count):
                if i and self.interval > 0:
                    await asyncio.sleep(self.interval)
                
                latency = await self._sample(client, url)
                if latency is not None:
                    latencies.append(latency)
        
        return StabilityOutcome.from_samples(sample_count, latencies)
