# backend/rehome_ops/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import schedule

__all__ = ["schedule"]
