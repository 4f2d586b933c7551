from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scoped_auth.config import Settings
from scoped_auth.database import get_db
from scoped_auth.dependencies.auth import get_current_token, get_settings, unauthorized
from scoped_auth.logging_config import get_logger
from scoped_auth.models.access_token import AccessToken
from scoped_auth.models.user import User
from scoped_auth.schemas.auth import LoginRequest, UserCreateRequest, UserResponse
from scoped_auth.schemas.common import APIResponse
from scoped_auth.schemas.tokens import AccessTokenResponse
from scoped_auth.services.auth import authenticate_user, hash_password
from scoped_auth.services.tokens import TokenTTLError, create_access_token, delete_access_token

logger = get_logger("auth")

# tags用於 API 文件分組，在 Swagger 頁面會顯示為「auth」區塊
router = APIRouter(prefix="/users", tags=["auth"])


def _email_exists() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"success": False, "error": "Bad Request", "message": "Email or username already exists"},
    )


@router.post(
    "",
    response_model=APIResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
def signup(request: UserCreateRequest, db: Session = Depends(get_db)):
    email = request.email.lower()

    conditions = [User.email == email]
    if request.username:
        conditions.append(User.username == request.username)
    existing_user = db.execute(select(User).where(or_(*conditions))).scalar_one_or_none()
    if existing_user:
        raise _email_exists()

    user = User(
        email=email,
        username=request.username,
        hashed_password=hash_password(request.password),
    )

    try:
        db.add(user)
        db.commit()
        # 重新讀取 DB 產生的欄位（id, created_at）
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise _email_exists()

    logger.info("User %s signed up", user.id)
    return APIResponse(success=True, data=UserResponse.model_validate(user))


@router.post("/login", response_model=APIResponse[AccessTokenResponse])
def login(
        request: LoginRequest,
        db: Session = Depends(get_db),
        config: Settings = Depends(get_settings),
):
    user = authenticate_user(
        db, request.password, email=request.email, username=request.username
    )
    if not user:
        raise unauthorized("login failed")

    # Login tokens carry default access only
    try:
        token = create_access_token(db, user, ttl=request.ttl, config=config)
    except TokenTTLError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"success": False, "error": "Unprocessable Entity", "message": str(e)},
        )

    return APIResponse(success=True, data=AccessTokenResponse.model_validate(token))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
        token: AccessToken = Depends(get_current_token),
        db: Session = Depends(get_db),
):
    """Invalidate the access token used for this request."""
    delete_access_token(db, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
