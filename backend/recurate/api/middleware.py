import logging
from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from recurate.api.dependencies import clear_session_cookie
from recurate.core.config import settings
from recurate.core.security import read_session_token
from recurate.services.session_store import SessionState, SessionStore, session_store

logger = logging.getLogger(__name__)

# Paths an expired session may still reach without being bounced to /login
PUBLIC_PATHS = ("/login", "/register", "/health")


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(settings.UPLOAD_URL_PREFIX + "/")


class SessionValidationMiddleware(BaseHTTPMiddleware):
    """
    Runs before every route.

    Reads the signed session cookie, validates and refreshes the session in
    one step, and exposes it as request.state.session (None when absent).
    A request carrying an expired session is redirected to /login and its
    cookie cleared, unless it is already headed for a public page.
    """

    def __init__(self, app, store: SessionStore = session_store):
        super().__init__(app)
        self.store = store

    async def dispatch(self, request: Request, call_next):
        token = read_session_token(request.cookies.get(settings.SESSION_COOKIE_NAME))
        state, session = self.store.check(token)
        request.state.session = session
        request.state.session_token = session.token if session else None

        if state is SessionState.EXPIRED and not _is_public(request.url.path):
            logger.info(f"Expired session on {request.method} {request.url.path}; redirecting to login")
            response = RedirectResponse("/login", status_code=303)
            clear_session_cookie(response)
            return response

        return await call_next(request)
