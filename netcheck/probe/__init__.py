"""
Probe engines for NetCheck
"""

from .base import Prober
from .dns_probe import DnsProbe, detect_cdn
from .http_probe import HttpTimingProbe, StabilityProbe
from .path_probe import PathProbe, parse_traceroute
from .system import NetworkProber

__all__ = [
    'Prober', 'DnsProbe', 'detect_cdn', 'HttpTimingProbe', 'StabilityProbe',
    'PathProbe', 'parse_traceroute', 'NetworkProber',
]
