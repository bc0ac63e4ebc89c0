"""
Target parsing and report assembly
"""

import re
from datetime import datetime, timezone
from typing import Optional

import httpx

from .diagnostics import Analysis
from .errors import InvalidTargetError
from .models import DiagnosticReport, DiagnosticSnapshot, Target


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"
SCHEMES = ('http', 'https')
SCHEME_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")


def parse_target(target: str) -> Target:
    """
    Normalize user input into a hostname and URL.
    
    Args:
        target: Host name or http(s) URL; input without a scheme gets
            https://. The scheme is case-insensitive.
    
    Returns:
        Target
    
    Raises:
        InvalidTargetError: if no host name can be extracted or the
            scheme is not http or https
    """
    raw = (target or '').strip()
    if not raw:
        raise InvalidTargetError("Target is empty")
    
    match = SCHEME_PATTERN.match(raw)
    if match:
        scheme = match.group(1).lower()
        rest = raw[match.end():]
        if scheme not in SCHEMES:
            raise InvalidTargetError(f"Unsupported scheme '{scheme}' in '{raw}', use http or https")
        url = f"{scheme}://{rest}"
    else:
        url = f"https://{raw}"
    
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidTargetError(f"Invalid target '{raw}': {e}") from e
    
    if not parsed.host:
        raise InvalidTargetError(f"Cannot extract a host name from '{raw}'")
    
    return Target(hostname=parsed.host.lower(), url=url, raw=raw)


def format_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def assemble_report(target: Target, snapshot: DiagnosticSnapshot, analysis: Analysis,
                    now: Optional[datetime] = None) -> DiagnosticReport:
    """Package a snapshot and its analysis into the final report"""
    return DiagnosticReport(
        target=target.url,
        timestamp=format_timestamp(now),
        status=analysis.status,
        resolution=snapshot.resolution,
        transport=snapshot.transport,
        path=snapshot.path,
        stability=snapshot.stability,
        issues=analysis.issues,
        recommendations=analysis.recommendations,
        score=analysis.score,
    )
