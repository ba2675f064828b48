"""
Combo routers - /api/combos/*
Handles combo structure management, price calculation and selection recording.
"""

from .routes import router

__all__ = ["router"]
