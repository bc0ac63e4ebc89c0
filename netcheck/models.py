"""
Data models for NetCheck
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


NO_RESPONSE = "*"


class Step:
    """Progress step names, in the order they are reported"""
    RESOLUTION = "resolution"
    TRANSPORT = "transport"
    SECURE_CHANNEL = "secure-channel"
    HTTP = "http"
    PATH = "path"
    STABILITY = "stability"


ALL_STEPS = (
    Step.RESOLUTION,
    Step.TRANSPORT,
    Step.SECURE_CHANNEL,
    Step.HTTP,
    Step.PATH,
    Step.STABILITY,
)


class StepStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class IssueCategory(Enum):
    RESOLUTION = "resolution"
    TRANSPORT = "transport"
    SECURE_CHANNEL = "secure-channel"
    PATH = "path"
    STABILITY = "stability"
    HTTP_STATUS = "http-status"


class IssueSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class OverallStatus(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"
    FAILED = "failed"


class LogLevel(Enum):
    """Trace log level"""
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    
    @classmethod
    def parse(cls, text: Optional[str]) -> "LogLevel":
        """
        Convert free-form level text into a LogLevel.
        
        Matching is case-insensitive; anything unrecognised is INFO.
        """
        if not text:
            return cls.INFO
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.INFO
    
    @classmethod
    def for_status(cls, status: StepStatus) -> "LogLevel":
        return _STATUS_LEVELS.get(status, cls.INFO)


_STATUS_LEVELS = {
    StepStatus.SUCCESS: LogLevel.SUCCESS,
    StepStatus.WARNING: LogLevel.WARNING,
    StepStatus.ERROR: LogLevel.ERROR,
}


@dataclass(frozen=True)
class ResolutionOutcome:
    """Result of resolving the target name"""
    target: str
    addresses: tuple[str, ...] = ()
    lookup_ms: float = 0.0
    ttl: Optional[int] = None
    nameservers: Optional[tuple[str, ...]] = None
    cdn: Optional[str] = None
    
    @property
    def resolved(self) -> bool:
        return bool(self.addresses)
    
    @property
    def first_address(self) -> str:
        return self.addresses[0] if self.addresses else ""


@dataclass(frozen=True)
class TransportOutcome:
    """
    Connection timing for one HTTP(S) request.
    
    All timings are cumulative milliseconds from the start of the request,
    so each phase is at least as large as the one before it. Exclusive
    phase durations are derived by subtraction.
    """
    lookup_ms: float
    connect_ms: float
    secure_channel_ms: float
    first_byte_ms: float
    total_ms: float
    response_code: int = 0  # 0 = no response received
    throughput_kbps: float = 0.0
    
    @property
    def responded(self) -> bool:
        return self.response_code != 0
    
    @property
    def connect_only_ms(self) -> float:
        return self.connect_ms - self.lookup_ms
    
    @property
    def secure_channel_only_ms(self) -> float:
        return self.secure_channel_ms - self.connect_ms
    
    @property
    def timings_monotonic(self) -> bool:
        """False if any derived phase duration would be negative"""
        return self.connect_only_ms >= 0 and self.secure_channel_only_ms >= 0


@dataclass(frozen=True)
class PathHop:
    """A single hop of a path trace"""
    index: int
    address: str = NO_RESPONSE
    hostname: Optional[str] = None
    rtt_ms: float = 0.0
    loss_percent: float = 100.0
    
    @property
    def responded(self) -> bool:
        return self.address != NO_RESPONSE


@dataclass(frozen=True)
class PathTraceOutcome:
    """Complete path trace"""
    target_address: str
    hops: tuple[PathHop, ...] = ()
    total_hops: int = 0
    elapsed_ms: float = 0.0
    
    @property
    def unresponsive_hops(self) -> int:
        return sum(1 for hop in self.hops if not hop.responded)


@dataclass(frozen=True)
class StabilityOutcome:
    """Summary of repeated request sampling"""
    sample_count: int
    successful: int = 0
    success_rate: float = 0.0
    min_ms: float = 0.0
    avg_ms: float = 0.0
    max_ms: float = 0.0
    jitter_ms: float = 0.0
    
    @classmethod
    def from_samples(cls, sample_count: int, latencies: list[float]) -> "StabilityOutcome":
        """
        Summarize successful sample latencies.
        
        Args:
            sample_count: Number of samples attempted
            latencies: Round-trip times (ms) of the successful samples only
        
        Returns:
            StabilityOutcome; timing fields are 0.0 when nothing succeeded
        """
        successful = len(latencies)
        rate = (successful / sample_count) * 100.0 if sample_count > 0 else 0.0
        
        if not latencies:
            return cls(sample_count=sample_count, successful=0, success_rate=rate)
        
        avg = sum(latencies) / successful
        jitter = sum(abs(t - avg) for t in latencies) / successful
        
        return cls(
            sample_count=sample_count,
            successful=successful,
            success_rate=rate,
            min_ms=min(latencies),
            avg_ms=avg,
            max_ms=max(latencies),
            jitter_ms=jitter,
        )


@dataclass(frozen=True)
class Issue:
    """A detected problem with remediation text"""
    category: IssueCategory
    severity: IssueSeverity
    title: str
    description: str
    causes: tuple[str, ...] = ()
    solutions: tuple[str, ...] = ()


@dataclass(frozen=True)
class DiagnosticSnapshot:
    """What one run learned; absent outcomes are None"""
    resolution: Optional[ResolutionOutcome] = None
    transport: Optional[TransportOutcome] = None
    path: Optional[PathTraceOutcome] = None
    stability: Optional[StabilityOutcome] = None


@dataclass(frozen=True)
class DiagnosticReport:
    """Complete diagnostic report"""
    target: str
    timestamp: str
    status: OverallStatus
    resolution: Optional[ResolutionOutcome] = None
    transport: Optional[TransportOutcome] = None
    path: Optional[PathTraceOutcome] = None
    stability: Optional[StabilityOutcome] = None
    issues: tuple[Issue, ...] = ()
    recommendations: tuple[str, ...] = ()
    score: int = 100


@dataclass(frozen=True)
class ProgressEvent:
    step: str
    status: StepStatus
    message: str


@dataclass(frozen=True)
class TraceLogEntry:
    """One line of the diagnostic trace log"""
    timestamp: str
    level: LogLevel
    category: str
    message: str
    raw_data: Optional[str] = None
    
    @classmethod
    def from_dict(cls, data: dict) -> "TraceLogEntry":
        return cls(
            timestamp=str(data.get('timestamp', '')),
            level=LogLevel.parse(data.get('level')),
            category=str(data.get('category', '')),
            message=str(data.get('message', '')),
            raw_data=data.get('raw_data'),
        )
    
    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "category": self.category,
            "message": self.message,
            "raw_data": self.raw_data,
        }


@dataclass(frozen=True)
class Target:
    """Normalized diagnostic target"""
    hostname: str
    url: str
    raw: str = field(default="", compare=False)
