"""
Output modules for NetCheck
"""

from .console import ConsoleOutput
from .json_export import JsonExporter, load_trace_log

__all__ = ['ConsoleOutput', 'JsonExporter', 'load_trace_log']
