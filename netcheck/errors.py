"""
Exceptions for NetCheck
"""


class NetCheckError(Exception):
    """Base class for NetCheck errors"""


class InvalidTargetError(NetCheckError, ValueError):
    """Target could not be turned into a hostname; raised before probing"""


class ProbeError(NetCheckError):
    """A probe collaborator failed to produce a result"""


class ProbeTimeoutError(ProbeError):
    """A probe did not finish within its time limit"""
    
    def __init__(self, probe: str, timeout: float):
        self.probe = probe
        self.timeout = timeout
        super().__init__(f"{probe} timed out after {timeout:g}s")


class SlotAlreadyFilledError(NetCheckError):
    """An aggregator slot was written twice"""


class SnapshotNotReadyError(NetCheckError):
    """Snapshot requested before all probes settled"""
