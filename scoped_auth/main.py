from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from scoped_auth.api.router import declare_remote_methods, router
from scoped_auth.config import Settings, settings as default_settings
from scoped_auth.logging_config import setup_logging
from scoped_auth.remoting import RemoteMethodRegistry, verify_routes
from scoped_auth.schemas.common import ErrorResponse

# Setup application logging
logger = setup_logging()

_ERROR_NAMES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    422: "Unprocessable Entity",
}


async def http_exception_handler(request: Request, exc: HTTPException):
    """Unwrap the 'detail' field from HTTPException responses."""
    if exc.status_code >= 500:
        logger.error(
            "Unhandled error for request %s %s: %s",
            request.method,
            request.url.path,
            exc.detail,
        )
    else:
        logger.debug(
            "Request %s %s failed with %s", request.method, request.url.path, exc.status_code
        )

    content = exc.detail

    if isinstance(content, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=exc.headers,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=_ERROR_NAMES.get(exc.status_code, "Error"),
            message=str(content),
        ).model_dump(exclude_none=True),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return request validation failures in the error envelope (field info only, no values)."""
    errors = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    logger.debug(
        "Request %s %s failed validation: %d error(s)",
        request.method,
        request.url.path,
        len(errors),
    )

    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error="Unprocessable Entity",
            message=f"Request validation failed: {len(errors)} error(s)",
            data={"errors": errors},
        ).model_dump(exclude_none=True),
    )


async def generic_exception_handler(request: Request, exc: Exception):
    # 記錄完整的錯誤堆疊，並附上 API 路徑和 HTTP 方法方便定位
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    # Return safe, static message to client (no internal details exposed)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            message="An unexpected error occurred",
        ).model_dump(exclude_none=True),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Remote methods are declared from ``settings`` and frozen before the app
    is returned, so their access scopes cannot change while serving requests.
    """
    settings = settings or default_settings

    app = FastAPI(title="Scoped Access Token API")

    remote_methods = RemoteMethodRegistry()
    declare_remote_methods(remote_methods, settings)
    remote_methods.freeze()

    app.state.settings = settings
    app.state.remote_methods = remote_methods

    app.include_router(router)
    verify_routes(remote_methods, app.routes)

    # starlette 的 HTTPException 也涵蓋 FastAPI 的子類別與路由層的 404/405
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health", tags=["health"])
    def health_check():
        return {"status": "healthy"}

    logger.info(
        "Declared remote methods: %s",
        ", ".join(f"{m.name}{sorted(m.access_scopes)}" for m in remote_methods),
    )
    return app


app = create_app()
