from __future__ import annotations

"""
HTTP surface for Courtside.

Expose ``create_app`` so callers can run ``uvicorn --factory courtside.server:create_app``.
"""

from .app import create_app

__all__ = ["create_app"]
