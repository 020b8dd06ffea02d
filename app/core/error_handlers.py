"""HTTP error handlers for the console FastAPI application.

This module provides the bridge between application exceptions and HTTP responses.
It maps domain-level exceptions to appropriate HTTP status codes and response formats.

Purpose:
    - Keep HTTP concerns separate from the moderation and analytics logic
    - Provide consistent error response format across the console API
    - Expose one display message per failed operation in `detail`
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.exceptions import (
    AppException,
    AuthenticationError,
    NoSelectionError,
    RequestRejectedError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Convert a local ValidationError into an HTTP 422 Unprocessable Entity JSON response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (ValidationError): The validation failure; `field` is included when set, and an empty bulk selection adds `kind: "no_selection"`.

    Returns:
        JSONResponse: Response with status 422 and a JSON body containing `detail` and, when available, `field` and `kind`.
    """
    content = {"detail": str(exc)}
    if exc.field:
        content["field"] = exc.field
    if isinstance(exc, NoSelectionError):
        content["kind"] = exc.kind
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, content=content
    )


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """
    Convert a missing or refused admin credential into a 401 Unauthorized JSON response.

    Returns:
        JSONResponse: Response with status 401, a `detail` message, and `WWW-Authenticate: Bearer` header.
    """
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def request_rejected_handler(
    request: Request, exc: RequestRejectedError
) -> JSONResponse:
    """
    Map a request the learning platform refused to 502 Bad Gateway.

    Returns:
        JSONResponse: Response with status 502, the upstream message in `detail` and the upstream status in `upstream_status`.
    """
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc), "upstream_status": exc.status_code},
    )


async def transport_error_handler(
    request: Request, exc: TransportError
) -> JSONResponse:
    """Map an unreachable learning platform to 503 Service Unavailable."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)}
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle unhandled application-level exceptions and produce a standardized 500 Internal Server Error response.

    Returns:
        JSONResponse: HTTP 500 response with content {"detail": "An internal error occurred"}.
    """
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal error occurred"},
    )


def register_exception_handlers(app) -> None:
    """
    Register the console's domain-to-HTTP exception handlers on a FastAPI app.

    Handlers are resolved along the exception's MRO, so UnauthorizedError (which is
    also a RequestRejectedError) is registered on its own to keep it a 401.
    Mappings: ValidationError -> 422, UnauthorizedError and AuthenticationError -> 401,
    RequestRejectedError -> 502, TransportError -> 503, AppException -> 500.

    Parameters:
        app: The FastAPI application instance to which the exception handlers will be attached.
    """
    app.add_exception_handler(ValidationError, validation_error_handler)

    app.add_exception_handler(UnauthorizedError, authentication_error_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)

    app.add_exception_handler(RequestRejectedError, request_rejected_handler)
    app.add_exception_handler(TransportError, transport_error_handler)

    # Catch-all for unhandled application exceptions
    app.add_exception_handler(AppException, app_exception_handler)
