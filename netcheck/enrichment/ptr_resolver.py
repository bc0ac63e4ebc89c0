"""
PTR (reverse DNS) resolver for path hops
"""

import asyncio
import logging
import socket
from typing import Optional
from concurrent.futures import ThreadPoolExecutor


logger = logging.getLogger(__name__)


class PTRResolver:
    """
    Async PTR record resolver.
    
    Looks up host names for hop addresses in a thread pool. Lookups that
    fail or run past the timeout yield None; a missing name is not an
    error for a path trace.
    """
    
    def __init__(self, timeout: float = 2.0, max_workers: int = 10):
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
    
    @staticmethod
    def _resolve_sync(address: str) -> Optional[str]:
        try:
            hostname, _, _ = socket.gethostbyaddr(address)
            return hostname
        except (socket.herror, socket.gaierror, OSError):
            return None
    
    async def resolve(self, address: str) -> Optional[str]:
        """
        Reverse lookup for one address.
        
        Args:
            address: IP address
        
        Returns:
            Hostname or None if not found
        """
        if not address:
            return None
        
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, self._resolve_sync, address),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.debug("PTR lookup for %s timed out", address)
            return None
    
    async def resolve_many(self, addresses: list[str]) -> dict[str, Optional[str]]:
        """
        Reverse lookups for several addresses in parallel.
        
        Args:
            addresses: IP addresses (duplicates and blanks ignored)
        
        Returns:
            Dict mapping address -> hostname (or None)
        """
        unique = list(dict.fromkeys(a for a in addresses if a))
        
        if not unique:
            return {}
        
        results = await asyncio.gather(*(self.resolve(a) for a in unique))
        return dict(zip(unique, results))
    
    def close(self):
        """Shutdown thread pool"""
        self._executor.shutdown(wait=False)
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
