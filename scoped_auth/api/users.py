from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from scoped_auth.database import get_db
from scoped_auth.dependencies.auth import AuthContext, require_access
from scoped_auth.models.user import User
from scoped_auth.schemas.auth import UserResponse
from scoped_auth.schemas.common import APIResponse
from scoped_auth.utils.authorization import check_owner

router = APIRouter(prefix="/users", tags=["users"])


# 必須在 /{user_id} 之前註冊，否則 "scoped" 會被當成 user_id 解析
@router.get("/scoped", status_code=status.HTTP_204_NO_CONTENT)
def scoped(auth: AuthContext = Depends(require_access("scoped"))):
    """
    Custom remote method guarded by non-default access scopes.

    Side-effect only: any authenticated token whose scopes match gets 204.
    """
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}",
    response_model=APIResponse[UserResponse],
    status_code=status.HTTP_200_OK,
)
def find_by_id(
        user_id: int,
        auth: AuthContext = Depends(require_access("findById")),
        db: Session = Depends(get_db),
):
    check_owner(auth, user_id)

    user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"success": False, "error": "Not Found", "message": "User not found"},
        )

    return APIResponse(success=True, data=UserResponse.model_validate(user))
