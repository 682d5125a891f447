from __future__ import annotations

from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from agrimandi.application.errors import AuthError, PermissionDenied
from agrimandi.config.settings import Settings
from agrimandi.infrastructure.auth.context import AuthContext
from agrimandi.infrastructure.repos.accounts_sqlalchemy import AccountsSQLAlchemyRepository

PUBLIC_PATHS: Iterable[str] = (
    "/api/v1/health",
    "/api/v1/auth/",
    "/docs",
    "/openapi.json",
    "/redoc",
)

# Market data is public to read; writes under the same prefixes still need a token.
PUBLIC_READ_PATHS: Iterable[str] = (
    "/api/v1/commodities",
    "/api/v1/mandi",
    "/api/v1/external-weather",
)


def is_public(method: str, path: str) -> bool:
    if any(path.startswith(prefix) for prefix in PUBLIC_PATHS):
        return True
    if method in ("GET", "HEAD"):
        return any(path.startswith(prefix) for prefix in PUBLIC_READ_PATHS)
    return False


class AuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, settings: Settings) -> None:
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next) -> Response:
        # Let CORS preflight pass without auth checks
        if request.method == "OPTIONS":
            return await call_next(request)
        if is_public(request.method, request.url.path):
            return await call_next(request)

        try:
            authorization = request.headers.get("Authorization")
            if not authorization:
                raise AuthError("Missing Authorization header")
            scheme, _, token = authorization.partition(" ")
            if scheme.lower() != "bearer" or not token:
                raise AuthError("Invalid Authorization header")
            jwt_service = getattr(request.app.state, "jwt_service", None)
            if jwt_service is None:
                raise RuntimeError("JWT service not configured")
            claims = jwt_service.decode(token)

            session_factory = getattr(request.app.state, "session_factory", None)
            if session_factory is None:
                raise RuntimeError("Session factory not configured")
            async with session_factory() as session:
                account = await AccountsSQLAlchemyRepository(session).get(claims.account_id)
            if not account:
                raise AuthError("Account no longer exists")
            if not account.is_verified:
                raise PermissionDenied("Please verify your email first", reason="unverified")
            # Role comes from the stored account, not the token claim.
            request.state.auth_context = AuthContext(
                account_id=account.id,
                role=account.role,
                email=account.email,
                claims=claims,
            )
            return await call_next(request)
        except (AuthError, PermissionDenied) as exc:
            payload = {"code": exc.code, "message": exc.message}
            if exc.details is not None:
                payload["details"] = exc.details
            return JSONResponse(status_code=exc.status_code, content=payload)
