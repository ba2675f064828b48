"""
Services module for business logic.

CLEAN ARCHITECTURE:
- domain/: Application services (combo structure, pricing, selections, orderables)
- permissions/: Actor capability and typed authorization decisions

Usage:
    from rest_api.services.domain import ComboService
    combo = ComboService(db).get(combo_id)
"""
