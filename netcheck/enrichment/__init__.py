"""
Enrichment modules for NetCheck
"""

from .ptr_resolver import PTRResolver

__all__ = ['PTRResolver']
