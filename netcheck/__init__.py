"""
NetCheck - Network Health Diagnostic Tool

Resolves, times, traces and samples a target, then turns the
measurements into issues, recommendations and an overall verdict.
"""

__version__ = "1.0.0"
__author__ = "NetCheck"
