from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session as DbSession
from recurate.api.dependencies import require_session
from recurate.api.templating import render
from recurate.core.database import get_db
from recurate.services.post_service import post_service
from recurate.services.session_store import Session

router = APIRouter(tags=["posts"])


@router.get("/", response_class=HTMLResponse)
@router.get("/main", response_class=HTMLResponse)
def feed(
    request: Request,
    session: Session = Depends(require_session),
    db: DbSession = Depends(get_db)
):
    """Every post, newest first"""
    posts = post_service.list_feed(db)
    return render(request, "main.html", {"title": "re*curate", "posts": posts})


@router.post("/create-post")
def create_post(
    content: str = Form(""),
    media: Optional[UploadFile] = File(None),
    session: Session = Depends(require_session),
    db: DbSession = Depends(get_db)
):
    post_service.create_post(db, session, content, media)
    return RedirectResponse("/main", status_code=303)


@router.get("/edit-post/{post_id}", response_class=HTMLResponse)
def edit_post_form(
    post_id: int,
    request: Request,
    session: Session = Depends(require_session),
    db: DbSession = Depends(get_db)
):
    post = post_service.get_post_for_edit(db, session, post_id)
    return render(request, "edit_post.html", {"title": "edit post", "post": post})


@router.post("/update-post/{post_id}")
def update_post(
    post_id: int,
    content: str = Form(""),
    session: Session = Depends(require_session),
    db: DbSession = Depends(get_db)
):
    post_service.update_post(db, session, post_id, content)
    return RedirectResponse("/main", status_code=303)


@router.post("/delete-post/{post_id}")
def delete_post(
    post_id: int,
    session: Session = Depends(require_session),
    db: DbSession = Depends(get_db)
):
    post_service.delete_post(db, session, post_id)
    return RedirectResponse("/main", status_code=303)
