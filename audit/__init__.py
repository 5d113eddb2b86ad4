"""
Audit Module

Per-day translation records and the admin endpoint that reads them.
"""

from audit.router import router

__all__ = ["router"]
