from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.templating import Jinja2Templates

from bitrewards.core import config

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def money(value: Any) -> str:
    if value is None:
        value = 0
    return f"{Decimal(str(value)):.2f}"


templates.env.filters["money"] = money


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = status.HTTP_200_OK,
):
    """Render a view with the language and support details every page uses."""
    view_context = {
        "lang": getattr(request.state, "lang", "en"),
        "t": getattr(request.state, "t", {}),
        "support_contact": config.SUPPORT_CONTACT,
        "logged_in": getattr(request.state, "user_id", None) is not None,
    }
    view_context.update(context or {})
    return templates.TemplateResponse(
        request, name, view_context, status_code=status_code
    )
