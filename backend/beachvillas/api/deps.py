"""Shared API dependencies, a single import point for all routers.

Re-exports database session and authentication dependencies so that router
modules can import everything they need from one place::

    from beachvillas.api.deps import get_db, get_current_user, require_admin
"""

from beachvillas.auth.dependencies import (
    get_current_user,
    get_optional_user,
    require_admin,
    require_host,
    require_roles,
)
from beachvillas.database import get_db

__all__ = [
    "get_db",
    "get_current_user",
    "get_optional_user",
    "require_admin",
    "require_host",
    "require_roles",
]
