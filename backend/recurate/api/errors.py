import logging
from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from slowapi.errors import RateLimitExceeded
from recurate.api.templating import render_dialog
from recurate.core.exceptions import (
    HashingError,
    InvalidCredentialsError,
    NotFoundError,
    RecurateError,
    StorageError,
    UnauthenticatedError,
)
from recurate.core.rate_limit import TOO_MANY_ATTEMPTS_MESSAGE

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Invalid email or password."
GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again later."


async def recurate_error_handler(request: Request, exc: RecurateError):
    """Translate service errors into pages; internal detail never reaches the body"""
    if isinstance(exc, UnauthenticatedError):
        return RedirectResponse("/login", status_code=303)

    if isinstance(exc, (InvalidCredentialsError, NotFoundError)):
        # Unknown email and wrong password look the same to the client
        return render_dialog(request, LOGIN_FAILED_MESSAGE, 401)

    if isinstance(exc, (StorageError, HashingError)):
        logger.error(f"{exc.code} while handling {request.method} {request.url.path}")
        return render_dialog(request, GENERIC_FAILURE_MESSAGE, 500)

    return render_dialog(request, exc.message, exc.status_code)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit hit on {request.url.path} from {request.client.host if request.client else '?'}")
    return render_dialog(request, TOO_MANY_ATTEMPTS_MESSAGE, 429)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecurateError, recurate_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
