"""
API Gateway Authentication Middleware
Trusts authentication performed by the API Gateway.
Reads user information from headers set by the Gateway.
"""

import json
from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from gridboard.core.logging import logger


# Open paths that don't require authentication (exact matches only)
OPEN_PATHS_EXACT = [
    "/docs",
    "/redoc",
    "/openapi.json",
    "/api/v1/health",
    "/",
]


def parse_roles(roles_header: str) -> list:
    """Roles arrive as a JSON array or as a comma separated string"""
    if not roles_header:
        return []
    try:
        roles = json.loads(roles_header)
        if not isinstance(roles, list):
            roles = [roles]
        return [str(r) for r in roles]
    except (json.JSONDecodeError, TypeError):
        return [r.strip() for r in roles_header.split(",") if r.strip()]


def _unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_gateway_user(request: Request, call_next):
    """
    Authentication middleware that trusts the API Gateway.

    The gateway has already validated the caller and forwards:
    - x-gateway-authenticated: "true"
    - x-user-id: verified user id
    - x-roles: roles (JSON array or comma separated), optional
    - x-username: display name, optional

    The user is stored on request.state.user. Exceptions raised from an http
    middleware bypass FastAPI's handlers, so failures are returned as responses.
    """
    path = request.url.path
    if path in OPEN_PATHS_EXACT:
        return await call_next(request)

    if path.startswith("/api/") and not path.startswith("/api/v"):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "You must specify the API version, e.g. /api/v1/..."},
        )

    gateway_authenticated = request.headers.get("x-gateway-authenticated")
    user_id = request.headers.get("x-user-id")

    if gateway_authenticated != "true":
        logger.warning(f"Unauthenticated request to {path}")
        return _unauthorized("Authentication required. Request must come through API Gateway.")

    if not user_id:
        logger.warning(f"Authenticated request to {path} missing x-user-id header")
        return _unauthorized("Missing user identification from Gateway.")

    request.state.user = {
        "userId": user_id,
        "roles": parse_roles(request.headers.get("x-roles")),
        "username": request.headers.get("x-username"),
    }

    logger.debug(f"User authenticated via Gateway: {user_id}")
    return await call_next(request)


async def get_current_user(request: Request) -> dict:
    """
    Dependency returning the user of an authenticated request

    Usage in endpoints:
        @router.get("/protected")
        async def protected_endpoint(user: dict = Depends(get_current_user)):
            return {"user_id": user["userId"]}

    Raises:
        HTTPException: If no user is attached to the request
    """
    user = getattr(request.state, "user", None)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user
