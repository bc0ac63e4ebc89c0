"""
Run configuration for NetCheck
"""

from dataclasses import dataclass


# Reference limits
RESOLUTION_TIMEOUT = 10.0  # seconds
PROBE_TIMEOUT = 30.0  # seconds, per phase-2 probe
STABILITY_SAMPLES = 10
SAMPLE_INTERVAL = 0.1  # seconds between stability samples
CONNECT_TIMEOUT = 10.0  # seconds
MAX_HOPS = 15


@dataclass(frozen=True)
class RunConfig:
    """Limits and switches for one diagnostic run"""
    resolution_timeout: float = RESOLUTION_TIMEOUT
    probe_timeout: float = PROBE_TIMEOUT
    stability_samples: int = STABILITY_SAMPLES
    sample_interval: float = SAMPLE_INTERVAL
    connect_timeout: float = CONNECT_TIMEOUT
    max_hops: int = MAX_HOPS
    resolve_hop_names: bool = False
