"""
Diagnostic analysis for probe results
"""

from dataclasses import dataclass, field
from typing import Optional

from .models import (
    DiagnosticSnapshot,
    Issue,
    IssueCategory,
    IssueSeverity,
    OverallStatus,
    PathTraceOutcome,
    ResolutionOutcome,
    StabilityOutcome,
    TransportOutcome,
)


# Configurable thresholds
SLOW_LOOKUP_THRESHOLD = 200  # ms
SLOW_CONNECT_THRESHOLD = 500  # ms, connection phase only
SLOW_SECURE_CHANNEL_THRESHOLD = 500  # ms, TLS phase only
SLOW_TOTAL_THRESHOLD = 3000  # ms
SLUGGISH_TOTAL_THRESHOLD = 1000  # ms
UNRESPONSIVE_HOP_RATIO = 0.30
MANY_HOPS_THRESHOLD = 20
UNSTABLE_SUCCESS_RATE = 80.0  # %
HIGH_JITTER_THRESHOLD = 100  # ms

# Score bands: (minimum score, status)
STATUS_BANDS = (
    (90, OverallStatus.EXCELLENT),
    (75, OverallStatus.GOOD),
    (50, OverallStatus.ACCEPTABLE),
    (25, OverallStatus.POOR),
)

ESCALATION_SCORE = 50

ALL_CLEAR = "The connection to the site works well; no problems were detected."
CHANGE_DNS = "Consider switching DNS servers to 1.1.1.1 (Cloudflare) or 8.8.8.8 (Google)."
CHECK_LINK = "Check the WiFi signal and consider using a wired LAN connection."
ESCALATE = "The connection has several problems; consider using a VPN or contacting your ISP."


def status_for_score(score: int) -> OverallStatus:
    """
    Map a score onto the five-level status.
    
    Scores outside 0-100 are valid and fall into the end bands.
    """
    for minimum, status in STATUS_BANDS:
        if score >= minimum:
            return status
    return OverallStatus.FAILED


@dataclass(frozen=True)
class Analysis:
    """Result of analysing one snapshot"""
    issues: tuple[Issue, ...]
    recommendations: tuple[str, ...]
    score: int
    status: OverallStatus


@dataclass
class _Findings:
    """Working state for a single evaluation"""
    score: int = 100
    issues: list[Issue] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    
    def add(self, issue: Issue, penalty: int = 0):
        self.issues.append(issue)
        self.score -= penalty
    
    def count(self, category: IssueCategory) -> int:
        return sum(1 for issue in self.issues if issue.category == category)


class Diagnostics:
    """
    Rule-based analysis of a diagnostic snapshot.
    
    Starts from 100 points and deducts per rule:
    - Resolution: no addresses (-50), slow lookup (-10)
    - Transport: no response (-50), slow connect (-15), slow TLS (-10),
      slow total (-15, or -5 without an issue between 1s and 3s),
      server error (-20)
    - Path: long path (-5); many silent hops is reported without penalty
    - Stability: low success rate (-30 or -10), high jitter (-5)
    
    Missing resolution or transport results count as failures of that
    probe. Missing path or stability results are noted as Info issues
    without a penalty.
    
    evaluate() has no side effects and is safe to call repeatedly.
    """
    
    def __init__(
        self,
        slow_lookup: float = SLOW_LOOKUP_THRESHOLD,
        slow_connect: float = SLOW_CONNECT_THRESHOLD,
        slow_secure_channel: float = SLOW_SECURE_CHANNEL_THRESHOLD,
        slow_total: float = SLOW_TOTAL_THRESHOLD,
        sluggish_total: float = SLUGGISH_TOTAL_THRESHOLD,
        unresponsive_hop_ratio: float = UNRESPONSIVE_HOP_RATIO,
        many_hops: int = MANY_HOPS_THRESHOLD,
        unstable_success_rate: float = UNSTABLE_SUCCESS_RATE,
        high_jitter: float = HIGH_JITTER_THRESHOLD
    ):
        self.slow_lookup = slow_lookup
        self.slow_connect = slow_connect
        self.slow_secure_channel = slow_secure_channel
        self.slow_total = slow_total
        self.sluggish_total = sluggish_total
        self.unresponsive_hop_ratio = unresponsive_hop_ratio
        self.many_hops = many_hops
        self.unstable_success_rate = unstable_success_rate
        self.high_jitter = high_jitter
    
    def evaluate(self, snapshot: DiagnosticSnapshot) -> Analysis:
        """
        Analyze a snapshot.
        
        Args:
            snapshot: Frozen probe results
        
        Returns:
            Analysis with issues, recommendations, score and status
        """
        findings = _Findings()
        
        self._check_resolution(snapshot.resolution, findings)
        self._check_transport(snapshot.transport, findings)
        self._check_path(snapshot.path, findings)
        self._check_stability(snapshot.stability, findings)
        
        self._summarize(findings)
        
        return Analysis(
            issues=tuple(findings.issues),
            recommendations=tuple(findings.recommendations),
            score=findings.score,
            status=status_for_score(findings.score),
        )
    
    def _check_resolution(self, resolution: Optional[ResolutionOutcome], findings: _Findings):
        if resolution is None:
            findings.add(Issue(
                category=IssueCategory.RESOLUTION,
                severity=IssueSeverity.ERROR,
                title="DNS resolution unavailable",
                description="The name lookup failed or did not finish in time",
                causes=(
                    "DNS server not responding",
                    "No network connection",
                    "DNS traffic blocked by a firewall",
                ),
                solutions=(
                    "Check your internet connection",
                    "Try switching DNS to 8.8.8.8 or 1.1.1.1",
                ),
            ), penalty=50)
            return
        
        if not resolution.resolved:
            findings.add(Issue(
                category=IssueCategory.RESOLUTION,
                severity=IssueSeverity.ERROR,
                title="DNS resolution failed",
                description=f"No IP address found for {resolution.target}",
                causes=(
                    "Domain does not exist or is not registered",
                    "DNS server not responding",
                    "DNS blocked by a firewall",
                ),
                solutions=(
                    "Check the domain name",
                    "Try switching DNS to 8.8.8.8 or 1.1.1.1",
                    "Check your internet connection",
                ),
            ), penalty=50)
        elif resolution.lookup_ms > self.slow_lookup:
            findings.add(Issue(
                category=IssueCategory.RESOLUTION,
                severity=IssueSeverity.WARNING,
                title="DNS lookup slow",
                description=(
                    f"DNS lookup took {resolution.lookup_ms:.0f}ms "
                    f"(should be < {self.slow_lookup:g}ms)"
                ),
                causes=(
                    "DNS server is geographically distant",
                    "DNS server is overloaded",
                    "No DNS cache",
                ),
                solutions=(
                    "Switch to a faster DNS such as Cloudflare (1.1.1.1) or Google (8.8.8.8)",
                    f"Add {resolution.target} to /etc/hosts with IP {resolution.first_address}",
                ),
            ), penalty=10)
        
        if resolution.cdn:
            findings.recommendations.append(
                f"The site uses the {resolution.cdn} CDN, which is a good sign for performance."
            )
    
    def _check_transport(self, transport: Optional[TransportOutcome], findings: _Findings):
        if transport is None:
            findings.add(Issue(
                category=IssueCategory.TRANSPORT,
                severity=IssueSeverity.ERROR,
                title="Connection timing unavailable",
                description="The connection test failed or did not finish in time",
                causes=(
                    "Site is down",
                    "Network path is very slow",
                    "Firewall blocking the connection",
                ),
                solutions=(
                    "Open the site in a browser to confirm it is up",
                    "Run the diagnostic again",
                ),
            ), penalty=50)
            return
        
        if not transport.responded:
            findings.add(Issue(
                category=IssueCategory.TRANSPORT,
                severity=IssueSeverity.ERROR,
                title="TCP connection failed",
                description="The TCP connection failed completely",
                causes=(
                    "Site is down",
                    "Port 443 is blocked",
                    "Firewall blocking the connection",
                    "Routing problem",
                ),
                solutions=(
                    "Open the site in a browser to check whether it works",
                    "Try using a VPN",
                    "Contact your ISP if the problem persists",
                ),
            ), penalty=50)
            return
        
        connect_only = transport.connect_only_ms
        if connect_only > self.slow_connect:
            findings.add(Issue(
                category=IssueCategory.TRANSPORT,
                severity=IssueSeverity.WARNING,
                title="TCP connect slow",
                description=(
                    f"TCP connect took {connect_only:.0f}ms "
                    f"(should be < {self.slow_connect:g}ms)"
                ),
                causes=(
                    "Server is far away (different continent)",
                    "Poor routing from the ISP",
                    "Network congestion",
                ),
                solutions=(
                    "This is usually caused by distance and is hard to improve",
                    "Try a VPN with a server closer to the target",
                ),
            ), penalty=15)
        
        secure_only = transport.secure_channel_only_ms
        if secure_only > self.slow_secure_channel:
            findings.add(Issue(
                category=IssueCategory.SECURE_CHANNEL,
                severity=IssueSeverity.WARNING,
                title="TLS handshake slow",
                description=(
                    f"TLS handshake took {secure_only:.0f}ms "
                    f"(should be < {self.slow_secure_channel:g}ms)"
                ),
                causes=(
                    "Long certificate chain",
                    "OCSP stapling not enabled",
                    "High latency to the server",
                ),
                solutions=(
                    "This is usually a server-side problem",
                    "Check for a man-in-the-middle on your network",
                ),
            ), penalty=10)
        
        if transport.total_ms > self.slow_total:
            findings.add(Issue(
                category=IssueCategory.TRANSPORT,
                severity=IssueSeverity.WARNING,
                title="Total time slow",
                description=(
                    f"Total time {transport.total_ms:.0f}ms "
                    f"(should be < {self.slow_total:g}ms)"
                ),
                causes=(
                    "Server responds slowly",
                    "Unstable network connection",
                    "Many redirects",
                ),
                solutions=(
                    "Check your network speed",
                    "Try again at a different time of day",
                ),
            ), penalty=15)
        elif transport.total_ms > self.sluggish_total:
            # Deducted without an issue entry
            findings.score -= 5
        
        code = transport.response_code
        if 400 <= code < 500:
            findings.add(Issue(
                category=IssueCategory.HTTP_STATUS,
                severity=IssueSeverity.WARNING,
                title=f"HTTP error {code}",
                description="The server returned a client-side error",
                causes=(
                    "Invalid request",
                    "Login required",
                    "Page does not exist",
                ),
                solutions=(
                    "Check that the URL is correct",
                ),
            ))
        elif code >= 500:
            findings.add(Issue(
                category=IssueCategory.HTTP_STATUS,
                severity=IssueSeverity.ERROR,
                title=f"HTTP error {code}",
                description="The server hit an internal error",
                causes=(
                    "Server under maintenance",
                    "Server overloaded",
                    "Server-side application error",
                ),
                solutions=(
                    "Wait and try again later",
                    "Check the service's status page",
                ),
            ), penalty=20)
    
    def _check_path(self, path: Optional[PathTraceOutcome], findings: _Findings):
        if path is None:
            findings.add(Issue(
                category=IssueCategory.PATH,
                severity=IssueSeverity.INFO,
                title="Path trace unavailable",
                description="The route to the server could not be traced",
                causes=(
                    "traceroute is not installed",
                    "Trace did not finish in time",
                ),
                solutions=(
                    "Install traceroute to see the network path",
                ),
            ))
            return
        
        silent_ratio = path.unresponsive_hops / max(1, len(path.hops))
        
        if silent_ratio > self.unresponsive_hop_ratio:
            findings.add(Issue(
                category=IssueCategory.PATH,
                severity=IssueSeverity.WARNING,
                title="Many hops not responding",
                description=f"{silent_ratio * 100:.0f}% of traceroute hops did not respond",
                causes=(
                    "Routers block ICMP (normal)",
                    "Firewall blocks traceroute",
                    "Routing problem",
                ),
                solutions=(
                    "This can be normal if the site still works",
                    "Try tcptraceroute for more detail",
                ),
            ))
        
        if path.total_hops > self.many_hops:
            findings.add(Issue(
                category=IssueCategory.PATH,
                severity=IssueSeverity.INFO,
                title="Many hops",
                description=f"{path.total_hops} hops to the destination (more than usual)",
                causes=(
                    "Server is far away",
                    "Routing is not optimal",
                ),
                solutions=(
                    "A VPN may help optimise routing",
                ),
            ), penalty=5)
    
    def _check_stability(self, stability: Optional[StabilityOutcome], findings: _Findings):
        if stability is None:
            findings.add(Issue(
                category=IssueCategory.STABILITY,
                severity=IssueSeverity.INFO,
                title="Stability data unavailable",
                description="Repeated connection sampling failed or did not finish in time",
                causes=(
                    "Sampling took longer than the probe timeout",
                    "Network connection dropped during sampling",
                ),
                solutions=(
                    "Run the diagnostic again",
                ),
            ))
            return
        
        rate = stability.success_rate
        
        if rate < 100.0:
            if rate < self.unstable_success_rate:
                findings.add(Issue(
                    category=IssueCategory.STABILITY,
                    severity=IssueSeverity.ERROR,
                    title="Unstable connection",
                    description=f"Only {rate:.0f}% of requests succeeded",
                    causes=(
                        "Unstable network",
                        "Weak WiFi signal",
                        "ISP problems",
                        "Server overloaded",
                    ),
                    solutions=(
                        "Move closer to the WiFi router or use a LAN cable",
                        "Restart the modem/router",
                        "Contact your ISP if the problem persists",
                    ),
                ), penalty=30)
            else:
                findings.add(Issue(
                    category=IssueCategory.STABILITY,
                    severity=IssueSeverity.WARNING,
                    title="Packet loss detected",
                    description=f"Success rate: {rate:.0f}%",
                    causes=(
                        "Temporary network congestion",
                        "Unstable WiFi signal",
                    ),
                    solutions=(
                        "Check the WiFi signal",
                        "Try again in a few minutes",
                    ),
                ), penalty=10)
        
        if stability.jitter_ms > self.high_jitter:
            findings.add(Issue(
                category=IssueCategory.STABILITY,
                severity=IssueSeverity.WARNING,
                title="High jitter",
                description=f"Response time varies by {stability.jitter_ms:.0f}ms",
                causes=(
                    "Unstable network",
                    "Other devices using the bandwidth",
                ),
                solutions=(
                    "Reduce the number of devices using the network at once",
                    "Use a LAN cable instead of WiFi",
                ),
            ), penalty=5)
    
    def _summarize(self, findings: _Findings):
        """Append general recommendations"""
        if not findings.issues:
            findings.recommendations.append(ALL_CLEAR)
            return
        
        if findings.count(IssueCategory.RESOLUTION):
            findings.recommendations.append(CHANGE_DNS)
        
        if findings.count(IssueCategory.TRANSPORT) or findings.count(IssueCategory.STABILITY):
            findings.recommendations.append(CHECK_LINK)
        
        if findings.score < ESCALATION_SCORE:
            findings.recommendations.append(ESCALATE)


def analyze(snapshot: DiagnosticSnapshot) -> tuple[tuple[Issue, ...], tuple[str, ...], OverallStatus]:
    """Convenience function: issues, recommendations and status for a snapshot"""
    analysis = Diagnostics().evaluate(snapshot)
    return analysis.issues, analysis.recommendations, analysis.status
