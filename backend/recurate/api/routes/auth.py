from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session as DbSession
from recurate.api.dependencies import clear_session_cookie, set_session_cookie
from recurate.api.templating import render
from recurate.core.database import get_db
from recurate.core.rate_limit import login_limit
from recurate.services.auth_service import auth_service
from recurate.services.session_store import Session

router = APIRouter(tags=["auth"])


def _start_browser_session(request: Request, session: Session, target: str) -> RedirectResponse:
    """Retire whatever session the browser had and point its cookie at the new one"""
    previous = getattr(request.state, "session_token", None)
    if previous and previous != session.token:
        auth_service.logout(previous)
    response = RedirectResponse(target, status_code=303)
    set_session_cookie(response, session)
    return response


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request):
    return render(request, "login.html", {"title": "re*curate login"})


@router.post("/login")
@login_limit
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: DbSession = Depends(get_db)
):
    """Authenticate and start a session. Admins land on /admin, everyone else on /main"""
    session = auth_service.login(db, email, password)
    target = "/admin" if session.is_admin else "/main"
    return _start_browser_session(request, session, target)


@router.get("/register", response_class=HTMLResponse)
def register_form(request: Request):
    return render(request, "register.html", {"title": "register to re*curate"})


@router.post("/register")
def register(
    request: Request,
    full_name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    profile_photo: Optional[UploadFile] = File(None),
    db: DbSession = Depends(get_db)
):
    """Create an account and log it in straight away"""
    session = auth_service.register(
        db,
        full_name=full_name,
        email=email,
        phone=phone,
        password=password,
        confirm_password=confirm_password,
        profile_photo=profile_photo,
    )
    return _start_browser_session(request, session, "/main")


@router.get("/logout")
def logout(request: Request):
    """Destroy the current session; safe to hit without one"""
    auth_service.logout(getattr(request.state, "session_token", None))
    response = RedirectResponse("/login", status_code=303)
    clear_session_cookie(response)
    return response
