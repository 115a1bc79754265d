import logging
from datetime import date
from io import BytesIO
from typing import Optional, Tuple

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, StreamingResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from calculator import (
    ACTIVITY_MAP,
    HEIGHT_UNITS,
    SEX_OPTIONS,
    WEIGHT_UNITS,
    CalorieCalculator,
    InvalidInput,
    format_result,
    parse_inputs,
    to_display_weight,
)
from charts import render_progress_chart
from config import LOG_LEVEL, TEMPLATES_DIR, session_secret_key
from models import CalculationResult, Goal, UserProfile

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_FORM = {
    "age": "33",
    "sex": "Female",
    "height": "150",
    "height_unit": "cm",
    "weight": "75",
    "weight_unit": "kg",
    "target_weight": "62",
    "target_date": "",
    "activity_level": "Lightly active",
}

app = FastAPI(title="Calorie Calculator")
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# The last submitted form lives in the signed session so the progress
# view can rebuild the projection.
app.add_middleware(SessionMiddleware, secret_key=session_secret_key())

calculator = CalorieCalculator()


def _form_context(form: dict, **extra) -> dict:
    context = {
        "form": form,
        "sex_options": SEX_OPTIONS,
        "height_units": HEIGHT_UNITS,
        "weight_units": WEIGHT_UNITS,
        "activity_levels": list(ACTIVITY_MAP),
        "error": None,
        "result_lines": [],
        "has_projection": False,
    }
    context.update(extra)
    return context


def _calculate(
    form: dict, today: Optional[date] = None
) -> Tuple[UserProfile, Goal, CalculationResult]:
    profile, goal = parse_inputs(**form)
    return profile, goal, calculator.compute(profile, goal, today)


def _stored_calculation(
    request: Request,
) -> Optional[Tuple[UserProfile, Goal, CalculationResult]]:
    form = request.session.get("last_calculation")
    if not form:
        return None
    try:
        return _calculate(form)
    except InvalidInput:
        logger.info("Dropping unusable stored calculation from session")
        request.session.pop("last_calculation", None)
        return None


@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return templates.TemplateResponse(
        request, "form.html", _form_context(dict(DEFAULT_FORM))
    )


@app.post("/calculate", response_class=HTMLResponse)
async def calculate_view(
    request: Request,
    age: str = Form(""),
    sex: str = Form("Female"),
    height: str = Form(""),
    height_unit: str = Form("cm"),
    weight: str = Form(""),
    weight_unit: str = Form("kg"),
    target_weight: str = Form(""),
    target_date: str = Form(""),
    activity_level: str = Form("Lightly active"),
):
    form = {
        "age": age,
        "sex": sex,
        "height": height,
        "height_unit": height_unit,
        "weight": weight,
        "weight_unit": weight_unit,
        "target_weight": target_weight,
        "target_date": target_date,
        "activity_level": activity_level,
    }

    try:
        _, _, result = _calculate(form)
    except InvalidInput as exc:
        logger.info("Rejected calculation input: %s", exc)
        request.session.pop("last_calculation", None)
        return templates.TemplateResponse(
            request,
            "form.html",
            _form_context(form, error=str(exc)),
            status_code=400,
        )

    request.session["last_calculation"] = form

    return templates.TemplateResponse(
        request,
        "form.html",
        _form_context(
            form,
            result_lines=format_result(result),
            has_projection=result.has_projection,
        ),
    )


@app.get("/progress", response_class=HTMLResponse)
async def progress_view(request: Request):
    stored = _stored_calculation(request)
    if stored is None or not stored[2].has_projection:
        return RedirectResponse(url="/", status_code=303)

    profile, _, result = stored
    rows = [
        {
            "day": point.day.strftime("%b %d"),
            "weight": to_display_weight(point.weight_kg, profile.weight_unit),
        }
        for point in result.weekly_projection
    ]
    return templates.TemplateResponse(
        request,
        "progress.html",
        {"rows": rows, "weight_unit": profile.weight_unit},
    )


@app.get("/progress.png")
def progress_chart(request: Request):
    stored = _stored_calculation(request)
    if stored is None or not stored[2].has_projection:
        raise HTTPException(status_code=404, detail="No weekly progress to plot.")

    profile, goal, result = stored
    png = render_progress_chart(
        result,
        weight_unit=profile.weight_unit,
        initial_weight=profile.weight,
        target_weight=goal.target_weight,
    )
    return StreamingResponse(BytesIO(png), media_type="image/png")


@app.get("/health")
async def health():
    return {"status": "ok"}
