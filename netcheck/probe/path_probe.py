"""
Path trace probe using the system traceroute
"""

import asyncio
import logging
import re
import time
from dataclasses import replace
from typing import Optional

from ..enrichment import PTRResolver
from ..errors import ProbeError
from ..models import NO_RESPONSE, PathHop, PathTraceOutcome


logger = logging.getLogger(__name__)


#  1  192.168.1.1  1.234 ms
#  2  *
HOP_PATTERN = re.compile(
    r"^\s*(\d+)\s+(?:([0-9a-fA-F:.]*[0-9a-fA-F])|(\*))\s*(?:(\d+(?:\.\d+)?)\s*ms)?"
)


def parse_traceroute(output: str) -> list[PathHop]:
    """
    Parse `traceroute -n -q 1` output.
    
    Args:
        output: Raw stdout; the first line is the banner
    
    Returns:
        Hops in order. Unanswered hops use the NO_RESPONSE address with
        rtt 0 and 100% loss.
    """
    hops: list[PathHop] = []
    
    for line in output.splitlines()[1:]:
        match = HOP_PATTERN.match(line)
        if not match:
            continue
        
        address = match.group(2) or NO_RESPONSE
        rtt = float(match.group(4)) if match.group(4) else 0.0
        responded = address != NO_RESPONSE
        
        hops.append(PathHop(
            index=int(match.group(1)),
            address=address,
            rtt_ms=rtt if responded else 0.0,
            loss_percent=0.0 if responded else 100.0,
        ))
    
    return hops


class PathProbe:
    """
    Runs traceroute as a child process and parses its output.
    
    One probe per hop, one second per hop wait. The child is killed if
    the surrounding task is cancelled.
    """
    
    def __init__(self, max_hops: int = 15, wait: float = 1.0,
                 resolve_names: bool = False, command: str = 'traceroute'):
        self.max_hops = max_hops
        self.wait = wait
        self.resolve_names = resolve_names
        self.command = command
    
    def _args(self, hostname: str) -> list[str]:
        return [
            self.command, '-n',
            '-m', str(self.max_hops),
            '-w', f"{self.wait:g}",
            '-q', '1',
            hostname,
        ]
    
    async def _run(self, hostname: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._args(hostname),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ProbeError(f"{self.command} is not installed") from e
        
        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            proc.kill()
            await proc.wait()
            raise
        
        if proc.returncode and not stdout:
            message = stderr.decode(errors='replace').strip() or f"exit status {proc.returncode}"
            raise ProbeError(f"{self.command} failed: {message}")
        
        return stdout.decode(errors='replace')
    
    async def _add_names(self, hops: list[PathHop]) -> list[PathHop]:
        with PTRResolver() as resolver:
            names = await resolver.resolve_many([h.address for h in hops if h.responded])
        
        return [
            replace(hop, hostname=names.get(hop.address)) if hop.responded else hop
            for hop in hops
        ]
    
    async def trace(self, hostname: str, target_address: Optional[str] = None) -> PathTraceOutcome:
        """
        Trace the path to hostname.
        
        Args:
            hostname: Host to trace to
            target_address: Address resolved earlier, recorded in the outcome
        
        Returns:
            PathTraceOutcome
        """
        start = time.perf_counter()
        output = await self._run(hostname)
        elapsed_ms = (time.perf_counter() - start) * 1000
        
        hops = parse_traceroute(output)
        if self.resolve_names and hops:
            hops = await self._add_names(hops)
        
        logger.debug("Traced %s: %d hops in %.0fms", hostname, len(hops), elapsed_ms)
        
        return PathTraceOutcome(
            target_address=target_address or '',
            hops=tuple(hops),
            total_hops=len(hops),
            elapsed_ms=round(elapsed_ms, 2),
        )
