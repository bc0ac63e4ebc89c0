"""
JSON export for NetCheck
"""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from ..models import DiagnosticReport, TraceLogEntry
from .. import __version__


def _plain(value):
    """Recursively convert enums and tuples for json.dump"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


class JsonExporter:
    """
    Export diagnostic reports to JSON format.
    
    Field names follow the report model; enums are written as their
    lower-case values.
    """
    
    def export(self, report: DiagnosticReport,
               trace_log: Optional[Iterable[TraceLogEntry]] = None,
               output_path: Optional[Path] = None) -> dict:
        """
        Export report to JSON.
        
        Args:
            report: Diagnostic report
            trace_log: Optional progress trace entries
            output_path: Optional file path to write
        
        Returns:
            JSON-serializable dict
        """
        data = {
            "meta": {
                "version": __version__,
                "generator": "NetCheck",
                "generated_at": datetime.now(timezone.utc).isoformat(),
            },
            "report": _plain(asdict(report)),
            "trace_log": [entry.to_dict() for entry in (trace_log or [])],
        }
        
        if output_path:
            self._write_file(data, output_path)
        
        return data
    
    def _write_file(self, data: dict, path: Path):
        """Write JSON to file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)


def load_trace_log(path: Path) -> list[TraceLogEntry]:
    """Read trace log entries back from an exported file"""
    with open(path, encoding='utf-8') as f:
        data = json.load(f)
    return [TraceLogEntry.from_dict(item) for item in data.get('trace_log', [])]
