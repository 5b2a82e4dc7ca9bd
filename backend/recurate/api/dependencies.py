from typing import Optional
from fastapi import Depends, Request
from fastapi.responses import Response
from recurate.core.config import settings
from recurate.core.exceptions import ForbiddenError, UnauthenticatedError
from recurate.core.security import sign_session_token
from recurate.services.session_store import Session


def get_optional_session(request: Request) -> Optional[Session]:
    """
    Session validated by the middleware for this request, or None.

    The middleware has already refreshed last_activity, so handlers never
    touch the session store themselves.
    """
    return getattr(request.state, "session", None)


def require_session(session: Optional[Session] = Depends(get_optional_session)) -> Session:
    """Dependency for routes that need a logged-in user; redirects to /login otherwise"""
    if session is None:
        raise UnauthenticatedError()
    return session


def require_admin(session: Session = Depends(require_session)) -> Session:
    if not session.is_admin:
        raise ForbiddenError()
    return session


def set_session_cookie(response: Response, session: Session) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        sign_session_token(session.token),
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
