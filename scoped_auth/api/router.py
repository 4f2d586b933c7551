from fastapi import APIRouter

from scoped_auth.api.auth import router as auth_router
from scoped_auth.api.tokens import router as tokens_router
from scoped_auth.api.users import router as users_router
from scoped_auth.config import Settings
from scoped_auth.remoting import RemoteMethodRegistry
from scoped_auth.services.scopes import DEFAULT_SCOPE

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(tokens_router)


def declare_remote_methods(registry: RemoteMethodRegistry, config: Settings) -> None:
    """Declare the guarded methods served by ``router`` and their access scopes."""
    registry.register(
        "findById", verb="GET", path="/users/{user_id}", access_scopes=[DEFAULT_SCOPE]
    )
    registry.register(
        "__get__accessTokens",
        verb="GET",
        path="/users/{user_id}/accessTokens",
        access_scopes=[DEFAULT_SCOPE],
    )
    registry.register(
        "__create__accessTokens",
        verb="POST",
        path="/users/{user_id}/accessTokens",
        access_scopes=[DEFAULT_SCOPE],
    )
    registry.register(
        "scoped",
        verb="GET",
        path="/users/scoped",
        access_scopes=config.SCOPED_METHOD_ACCESS_SCOPES,
    )
