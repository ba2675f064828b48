"""
Shared module for common utilities used by the REST API.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, PricingMode, limits

- shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: X-Request-ID middleware and log filter

- shared.security: Authentication
  - auth.py: JWT signing/verification, current_user_context

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - combo_schemas.py: Pydantic payloads and outputs

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, current_user_context
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import PricingMode
    from shared.utils.exceptions import NotFoundError, ComboValidationError
"""
