"""
Name resolution probe via dnspython
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import dns.exception
import dns.resolver

from ..errors import ProbeError
from ..models import ResolutionOutcome


logger = logging.getLogger(__name__)


# Name-server substring -> CDN label, checked in order
CDN_MARKERS = (
    ('cloudflare', 'Cloudflare'),
    ('awsdns', 'AWS Route53'),
    ('akamai', 'Akamai'),
    ('fastly', 'Fastly'),
    ('azure', 'Azure'),
    ('google', 'Google Cloud'),
)


def detect_cdn(nameservers: Optional[list[str]]) -> Optional[str]:
    """
    Guess the CDN / DNS provider from name-server names.
    
    Args:
        nameservers: Authoritative name servers (may be None)
    
    Returns:
        Provider label or None
    """
    ns_str = ' '.join(nameservers or []).lower()
    
    for marker, label in CDN_MARKERS:
        if marker in ns_str:
            return label
    return None


class DnsProbe:
    """
    A-record lookup with TTL and authoritative name servers.
    
    NXDOMAIN and empty answers are reported as an outcome without
    addresses; a resolver that cannot be reached is a probe failure.
    """
    
    def __init__(self, timeout: float = 5.0, max_workers: int = 4):
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._resolver = dns.resolver.Resolver()
        self._resolver.timeout = timeout
        self._resolver.lifetime = timeout
    
    def _query_addresses(self, hostname: str) -> tuple[list[str], Optional[int]]:
        """Query A records"""
        try:
            answers = self._resolver.resolve(hostname, 'A')
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return [], None
        except dns.resolver.NoNameservers as e:
            raise ProbeError(f"No name server answered for {hostname}") from e
        except dns.exception.Timeout as e:
            raise ProbeError(f"DNS query for {hostname} timed out") from e
        
        addresses = [rdata.address for rdata in answers]
        ttl = answers.rrset.ttl if answers.rrset is not None else None
        return addresses, ttl
    
    def _query_nameservers(self, hostname: str) -> Optional[list[str]]:
        """
        Query NS records for hostname, walking up to parent zones.
        
        www.example.com usually has no NS records of its own, so the
        first zone that answers wins. Top-level zones are not tried.
        """
        labels = hostname.rstrip('.').split('.')
        
        for i in range(len(labels) - 1):
            zone = '.'.join(labels[i:])
            try:
                answers = self._resolver.resolve(zone, 'NS')
            except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
                continue
            except (dns.resolver.NoNameservers, dns.exception.Timeout):
                return None
            return [str(rdata.target).rstrip('.') for rdata in answers]
        
        return []
    
    def _lookup_sync(self, hostname: str) -> ResolutionOutcome:
        start = time.perf_counter()
        addresses, ttl = self._query_addresses(hostname)
        lookup_ms = (time.perf_counter() - start) * 1000
        
        nameservers = self._query_nameservers(hostname)
        
        logger.debug(
            "Resolved %s: %d address(es) in %.1fms, ns=%s",
            hostname, len(addresses), lookup_ms, nameservers,
        )
        
        return ResolutionOutcome(
            target=hostname,
            addresses=tuple(addresses),
            lookup_ms=round(lookup_ms, 2),
            ttl=ttl,
            nameservers=tuple(nameservers) if nameservers is not None else None,
            cdn=detect_cdn(nameservers),
        )
    
    async def resolve(self, hostname: str) -> ResolutionOutcome:
        """
        Async lookup for hostname.
        
        Args:
            hostname: Bare host name
        
        Returns:
            ResolutionOutcome
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._lookup_sync, hostname)
    
    def close(self):
        """Shutdown thread pool"""
        self._executor.shutdown(wait=False)
