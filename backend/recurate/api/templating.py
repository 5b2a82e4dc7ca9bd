from pathlib import Path
from typing import Any, Dict, Optional
from fastapi import Request
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    """Render a page with the caller's session (if any) available as current_session"""
    page_context = {"current_session": getattr(request.state, "session", None)}
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)


def render_dialog(request: Request, message: str, status_code: int, title: str = "re*curate"):
    return render(request, "dialog.html", {"message": message, "title": title}, status_code)
