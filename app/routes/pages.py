from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.adapters.edamam import DIET_PARAMS

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

# (value, label) pairs for the diet select, "" means no filter
DIET_OPTIONS = [("", "Any diet")] + [
    (diet, diet.replace("-", " ").capitalize()) for diet in DIET_PARAMS
]


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    """Search form, results grid and favourites grid. Data is loaded by static/script.js"""
    return templates.TemplateResponse(
        request, "index.html", {"diet_options": DIET_OPTIONS}
    )
