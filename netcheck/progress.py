"""
Progress sinks
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from .models import LogLevel, ProgressEvent, StepStatus, TraceLogEntry


logger = logging.getLogger(__name__)


class ProgressSink(Protocol):
    """Receives step transitions during a run"""
    
    def notify(self, step: str, status: StepStatus, message: str) -> None:
        ...


class NullSink:
    """Discards everything"""
    
    def notify(self, step: str, status: StepStatus, message: str) -> None:
        pass


class CallbackSink:
    """Adapts a plain callable to the ProgressSink interface"""
    
    def __init__(self, callback: Callable[[str, StepStatus, str], None]):
        self._callback = callback
    
    def notify(self, step: str, status: StepStatus, message: str) -> None:
        self._callback(step, status, message)


class FanoutSink:
    """
    Forwards each event to several sinks.
    
    A failing sink does not stop delivery to the others.
    """
    
    def __init__(self, *sinks: ProgressSink):
        self.sinks = list(sinks)
    
    def notify(self, step: str, status: StepStatus, message: str) -> None:
        for sink in self.sinks:
            try:
                sink.notify(step, status, message)
            except Exception:
                logger.exception("Progress sink %r failed", sink)


class EventLog:
    """Keeps every event in arrival order"""
    
    def __init__(self):
        self.events: list[ProgressEvent] = []
    
    def notify(self, step: str, status: StepStatus, message: str) -> None:
        self.events.append(ProgressEvent(step, status, message))
    
    def for_step(self, step: str) -> list[ProgressEvent]:
        return [event for event in self.events if event.step == step]
    
    def final(self, step: str) -> Optional[ProgressEvent]:
        """Last event for step, None if it never reported"""
        events = self.for_step(step)
        return events[-1] if events else None


class TraceLog:
    """Records every event as a trace log entry"""
    
    TIMESTAMP_FORMAT = "%H:%M:%S.%f"
    
    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self._clock = clock
        self.entries: list[TraceLogEntry] = []
    
    def notify(self, step: str, status: StepStatus, message: str) -> None:
        self.entries.append(TraceLogEntry(
            timestamp=self._clock().strftime(self.TIMESTAMP_FORMAT)[:-3],
            level=LogLevel.for_status(status),
            category=step,
            message=message,
        ))
    
    def __len__(self):
        return len(self.entries)
    
    def __iter__(self):
        return iter(self.entries)
