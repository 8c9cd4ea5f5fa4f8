# utils/session_gate.py
import logging
from typing import Awaitable, Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse, Response

logger = logging.getLogger(__name__)

LOGIN_PATH = "/"
PROTECTED_PREFIX = "/dashboard"

SessionResolver = Callable[[Request], Awaitable[Optional[dict]]]


class SessionGateMiddleware(BaseHTTPMiddleware):
    """
    Redirects anonymous requests away from the dashboard and signed-in
    requests away from the login page. Every other request passes through.

    The resolved session user is kept on request.state.session_user so the
    auth dependency does not ask the backend a second time.
    """

    def __init__(self, app, resolve_user: SessionResolver):
        super().__init__(app)
        self.resolve_user = resolve_user

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        gated = path == LOGIN_PATH or path.startswith(PROTECTED_PREFIX)
        if not gated:
            return await call_next(request)

        user = await self.resolve_user(request)
        request.state.session_user = user

        if not user and path.startswith(PROTECTED_PREFIX):
            logger.info(f"Anonymous request to {path}, redirecting to {LOGIN_PATH}")
            return RedirectResponse(url=LOGIN_PATH)

        if user and path == LOGIN_PATH:
            logger.info(f"Signed-in request to {LOGIN_PATH}, redirecting to {PROTECTED_PREFIX}")
            return RedirectResponse(url=PROTECTED_PREFIX)

        return await call_next(request)
