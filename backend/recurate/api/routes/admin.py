from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session as DbSession
from recurate.api.dependencies import require_admin
from recurate.api.templating import render
from recurate.core.database import get_db
from recurate.services.admin_service import build_dashboard
from recurate.services.session_store import Session

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("", response_class=HTMLResponse)
def dashboard(
    request: Request,
    session: Session = Depends(require_admin),
    db: DbSession = Depends(get_db)
):
    """Admin-only overview of accounts and post counts"""
    overview = build_dashboard(db)
    return render(request, "admin.html", {"title": "re*curate admin", "dashboard": overview})
