"""
Shared module for common utilities across the REST API and the WS Gateway.

STRUCTURE:
- shared.security: Authentication and authorization
  - auth.py: JWT signing/verification, current_user_context, require_roles

- shared.infrastructure: Database and request tracing
  - db.py: SQLAlchemy sessions, transaction()
  - correlation.py: X-Request-ID middleware and log filter

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging and audit helpers
  - constants.py: Roles, ForumCategory, ReportReason, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - schemas.py: Shared Pydantic DTOs (camelCase on the wire)

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, current_user_context
    from shared.infrastructure.db import get_db, transaction
    from shared.config.settings import settings
    from shared.config.constants import Roles, ReportReason
    from shared.utils.exceptions import NotFoundError, ForbiddenError
"""

# This module provides no re-exports.
# All imports should use the canonical paths as documented above.
