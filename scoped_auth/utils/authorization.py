"""
Authorization utilities for resource-level checks.

Scope checks happen in require_access(); these helpers cover the checks that
need the route's path parameters, such as owner-only access.
"""
from scoped_auth.dependencies.auth import AuthContext, unauthorized
from scoped_auth.logging_config import get_logger

logger = get_logger("access")


def check_owner(auth: AuthContext, user_id: int) -> None:
    """
    Ensure the token's user is the user addressed by the route.

    Args:
        auth: AuthContext returned by require_access()
        user_id: The ``id`` path parameter

    Raises:
        HTTPException: 401 if the token belongs to another user
    """
    if auth.user_id != user_id:
        logger.warning(
            "Owner check failed for %s: user %s accessed user %s",
            auth.method.name,
            auth.user_id,
            user_id,
        )
        raise unauthorized("Authorization Required")
