from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from scoped_auth.config import Settings
from scoped_auth.database import get_db
from scoped_auth.dependencies.auth import AuthContext, get_settings, require_access
from scoped_auth.schemas.common import APIResponse
from scoped_auth.schemas.tokens import AccessTokenCreateRequest, AccessTokenResponse
from scoped_auth.services.tokens import TokenTTLError, create_access_token, list_access_tokens
from scoped_auth.utils.authorization import check_owner

router = APIRouter(prefix="/users/{user_id}/accessTokens", tags=["tokens"])


@router.post(
    "",
    response_model=APIResponse[AccessTokenResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_token(
        user_id: int,
        request: AccessTokenCreateRequest,
        auth: AuthContext = Depends(require_access("__create__accessTokens")),
        db: Session = Depends(get_db),
        config: Settings = Depends(get_settings),
):
    """Issue a new access token with a custom ttl and scope set."""
    check_owner(auth, user_id)

    try:
        token = create_access_token(
            db, auth.token.user, ttl=request.ttl, scopes=request.scopes, config=config
        )
    except TokenTTLError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"success": False, "error": "Unprocessable Entity", "message": str(e)},
        )

    return APIResponse(success=True, data=AccessTokenResponse.model_validate(token))


@router.get(
    "",
    response_model=APIResponse[list[AccessTokenResponse]],
    status_code=status.HTTP_200_OK,
)
def list_tokens(
        user_id: int,
        auth: AuthContext = Depends(require_access("__get__accessTokens")),
        db: Session = Depends(get_db),
):
    """List all access tokens belonging to the user."""
    check_owner(auth, user_id)

    tokens = list_access_tokens(db, user_id)
    return APIResponse(
        success=True,
        data=[AccessTokenResponse.model_validate(token) for token in tokens],
    )
