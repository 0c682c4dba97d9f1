# Authentication module

from mosqueconnect.modules.auth.dependencies import (
    get_current_user,
    get_optional_user,
    get_current_admin,
    get_current_imam,
    get_current_business,
    require_roles,
)

__all__ = [
    "get_current_user",
    "get_optional_user",
    "get_current_admin",
    "get_current_imam",
    "get_current_business",
    "require_roles",
]
