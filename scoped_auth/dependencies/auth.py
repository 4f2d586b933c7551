"""
Access token authentication and scope authorization dependencies.

get_current_token() resolves the bearer token of a request; require_access()
builds a per-method guard that matches the token's scopes against the
remote method's access scopes and returns an AuthContext.
"""
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader, APIKeyQuery
from sqlalchemy.orm import Session

from scoped_auth.config import Settings
from scoped_auth.database import get_db
from scoped_auth.logging_config import get_logger
from scoped_auth.models.access_token import AccessToken
from scoped_auth.remoting import RemoteMethod, RemoteMethodRegistry
from scoped_auth.services.scopes import authorize, matching_scopes
from scoped_auth.services.tokens import delete_access_token, get_access_token, is_expired

logger = get_logger("access")

# auto_error=False：沒帶 token 時不要自動回傳 403，交給 get_current_token 統一回 401
access_token_query = APIKeyQuery(name="access_token", auto_error=False)
access_token_header = APIKeyHeader(name="X-Access-Token", auto_error=False)
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def unauthorized(message: str, data: dict | None = None) -> HTTPException:
    detail = {
        "success": False,
        "error": "Unauthorized",
        "message": message,
    }
    if data is not None:
        detail["data"] = data
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_remote_methods(request: Request) -> RemoteMethodRegistry:
    return request.app.state.remote_methods


def extract_token_id(
    query_token: str | None,
    header_token: str | None,
    authorization: str | None,
) -> str | None:
    """
    Pick the token id from the request.

    Lookup order: ``access_token`` query parameter, ``X-Access-Token`` header,
    ``Authorization`` header. The Authorization value may be the raw token id
    or ``Bearer <id>``.
    """
    if query_token:
        return query_token.strip()
    if header_token:
        return header_token.strip()
    if authorization:
        scheme, _, credentials = authorization.strip().partition(" ")
        if credentials and scheme.lower() == "bearer":
            return credentials.strip()
        return authorization.strip()
    return None


def get_current_token(
    query_token: str | None = Depends(access_token_query),
    header_token: str | None = Depends(access_token_header),
    authorization: str | None = Depends(authorization_header),
    db: Session = Depends(get_db),
) -> AccessToken:
    """
    Resolve and validate the request's access token.

    Raises:
        HTTPException: 401 if the token is missing, unknown or expired
    """
    token_id = extract_token_id(query_token, header_token, authorization)
    if not token_id:
        raise unauthorized("Authorization Required")

    token = get_access_token(db, token_id)
    if not token:
        raise unauthorized("Invalid token")

    if is_expired(token):
        # 過期的 token 直接刪除，之後再用也只會得到 Invalid token
        delete_access_token(db, token)
        raise unauthorized("Token expired")

    return token


@dataclass
class AuthContext:
    """Context object containing authentication and authorization information."""

    token: AccessToken
    """The validated access token"""

    method: RemoteMethod
    """The remote method being invoked"""

    granted_by: list[str]
    """Token scopes that matched the method's access scopes"""

    endpoint: str
    """The endpoint path (e.g., "/users/scoped")"""

    http_method: str
    """The HTTP method (e.g., "GET")"""

    @property
    def user_id(self) -> int:
        return self.token.user_id


def require_access(method_name: str):
    """
    Factory that creates a dependency guarding a remote method.

    Args:
        method_name: Name of a method declared in the app's RemoteMethodRegistry

    Returns:
        A dependency that validates the token's scopes and returns AuthContext
    """
    def dependency(
        request: Request,
        token: AccessToken = Depends(get_current_token),
        remote_methods: RemoteMethodRegistry = Depends(get_remote_methods),
    ) -> AuthContext:
        method = remote_methods.get(method_name)

        if not authorize(token.scopes, method.access_scopes):
            required_scopes = sorted(method.access_scopes)
            your_scopes = list(token.scopes or [])
            logger.warning(
                "Access denied to %s for user %s: required one of %s, token has %s",
                method.name,
                token.user_id,
                required_scopes,
                your_scopes,
            )
            raise unauthorized(
                "Access scope mismatch",
                data={
                    "method": method.name,
                    "required_scopes": required_scopes,
                    "your_scopes": your_scopes,
                },
            )

        auth = AuthContext(
            token=token,
            method=method,
            granted_by=sorted(matching_scopes(token.scopes, method.access_scopes)),
            endpoint=request.url.path,
            http_method=request.method,
        )
        logger.debug(
            "%s granted to user %s via %s (%s %s)",
            auth.method.name,
            auth.user_id,
            auth.granted_by,
            auth.http_method,
            auth.endpoint,
        )
        return auth

    return dependency
