"""
Collects probe outcomes for one run
"""

from typing import Optional

from .errors import SlotAlreadyFilledError, SnapshotNotReadyError
from .models import (
    DiagnosticSnapshot,
    PathTraceOutcome,
    ResolutionOutcome,
    StabilityOutcome,
    TransportOutcome,
)


_UNSET = object()


class ResultAggregator:
    """
    Write-once slots for the four probe outcomes.
    
    Each slot is written exactly once by the task that owns it; None
    records an absent outcome. The snapshot is only available after
    seal(), which the scheduler calls once every probe has settled.
    """
    
    SLOTS = ('resolution', 'transport', 'path', 'stability')
    
    def __init__(self):
        self._slots = {name: _UNSET for name in self.SLOTS}
        self._sealed = False
    
    def _record(self, slot: str, outcome):
        if self._sealed:
            raise SlotAlreadyFilledError(f"Aggregator is sealed; cannot record {slot}")
        if self._slots[slot] is not _UNSET:
            raise SlotAlreadyFilledError(f"{slot} outcome already recorded")
        self._slots[slot] = outcome
    
    def record_resolution(self, outcome: Optional[ResolutionOutcome]):
        self._record('resolution', outcome)
    
    def record_transport(self, outcome: Optional[TransportOutcome]):
        self._record('transport', outcome)
    
    def record_path(self, outcome: Optional[PathTraceOutcome]):
        self._record('path', outcome)
    
    def record_stability(self, outcome: Optional[StabilityOutcome]):
        self._record('stability', outcome)
    
    def is_recorded(self, slot: str) -> bool:
        return self._slots[slot] is not _UNSET
    
    @property
    def sealed(self) -> bool:
        return self._sealed
    
    def seal(self):
        """Stop accepting outcomes; slots never written are absent"""
        self._sealed = True
    
    def snapshot(self) -> DiagnosticSnapshot:
        """
        Frozen view of everything recorded.
        
        Raises:
            SnapshotNotReadyError: if called before seal()
        """
        if not self._sealed:
            raise SnapshotNotReadyError("Probes have not all settled yet")
        
        values = {
            name: (None if value is _UNSET else value)
            for name, value in self._slots.items()
        }
        return DiagnosticSnapshot(**values)
