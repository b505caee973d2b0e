"""Bearer token issue and checks.

The middleware never rejects a request. It only records who is asking, in
`request.state.user`, and the route decorators decide whether that is enough.
"""
import datetime as dt
import functools
import logging
from typing import Any, Awaitable, Callable

import jwt
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from dreamhost.domain.errors import UnauthorizedError


logger = logging.getLogger(__name__)


ALGORITHM = "HS256"


type Route[T] = Callable[[Request], Awaitable[T]]


def create_token(username: str, *, secret: str, ttl: int) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "username": username,
        "iat": now,
        "exp": now + dt.timedelta(seconds=ttl),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token: str, *, secret: str) -> dict[str, Any]:
    """Claims of a token. Raises `jwt.InvalidTokenError` if it is forged,
    expired or malformed."""
    return jwt.decode(
        token,
        secret,
        algorithms=[ALGORITHM],
        options={"require": ["exp", "username"]},
    )


def bearer_token(header: str | None) -> str | None:
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request.state.user = None
        token = bearer_token(request.headers.get("Authorization"))
        if token is not None:
            secret = request.app.state.config.secret_key
            try:
                request.state.user = decode_token(token, secret=secret)
            except jwt.InvalidTokenError as e:
                logger.debug("Ignoring token: %r", e)
        return await call_next(request)


def current_user(request: Request) -> dict[str, Any] | None:
    return getattr(request.state, "user", None)


def logged_in[T](route: Route[T]) -> Route[T]:
    """Any valid token will do."""

    @functools.wraps(route)
    async def wrapper(request: Request) -> T:
        if current_user(request) is None:
            raise UnauthorizedError()
        return await route(request)

    return wrapper


def correct_user[T](route: Route[T]) -> Route[T]:
    """The token must belong to the user named in the path."""

    @functools.wraps(route)
    async def wrapper(request: Request) -> T:
        user = current_user(request)
        if user is None or user.get("username") != request.path_params.get("username"):
            raise UnauthorizedError()
        return await route(request)

    return wrapper
