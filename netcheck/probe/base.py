"""
Abstract base class for probe implementations
"""

from abc import ABC, abstractmethod
from ..models import (
    PathTraceOutcome,
    ResolutionOutcome,
    StabilityOutcome,
    TransportOutcome,
)


class Prober(ABC):
    """
    The measurements a diagnostic run needs.
    
    Each coroutine may block for a while and may raise on failure; the
    scheduler bounds every call with its own timeout and treats any
    exception as a missing result.
    """
    
    @abstractmethod
    async def resolve(self, hostname: str) -> ResolutionOutcome:
        """
        Resolve hostname to addresses.
        
        Args:
            hostname: Bare host name
        
        Returns:
            ResolutionOutcome (addresses may be empty)
        """
    
    @abstractmethod
    async def time_connection(self, url: str) -> TransportOutcome:
        """Time one request to url, following redirects"""
    
    @abstractmethod
    async def trace_path(self, hostname: str, target_address: str) -> PathTraceOutcome:
        """Trace the network path to hostname"""
    
    @abstractmethod
    async def sample_stability(self, hostname: str, sample_count: int) -> StabilityOutcome:
        """Issue sample_count sequential requests and summarize them"""
    
    async def close(self):
        """Clean up resources"""
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
