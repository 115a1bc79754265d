from datetime import date

import pytest

from calculator import compute
from charts import render_progress_chart
from models import Goal, UserProfile

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _profile(weight_unit: str = "kg", weight: float = 75.0) -> UserProfile:
    return UserProfile(
        age=33,
        sex="Female",
        height=150.0,
        height_unit="cm",
        weight=weight,
        weight_unit=weight_unit,
        activity_level="Lightly active",
    )


def test_renders_png_in_kilograms():
    result = compute(_profile(), Goal(target_weight=62.0), date(2026, 1, 5))
    png = render_progress_chart(result, "kg", initial_weight=75.0, target_weight=62.0)
    assert png.startswith(PNG_MAGIC)


def test_renders_png_in_pounds():
    result = compute(_profile("lb", 165.0), Goal(target_weight=140.0), date(2026, 1, 5))
    png = render_progress_chart(result, "lb", initial_weight=165.0, target_weight=140.0)
    assert png.startswith(PNG_MAGIC)


def test_empty_projection_is_rejected():
    result = compute(_profile(), Goal(target_weight=80.0), date(2026, 1, 5))
    with pytest.raises(ValueError):
        render_progress_chart(result, "kg", initial_weight=75.0, target_weight=80.0)


def test_rendering_leaves_no_pyplot_figures():
    import matplotlib.pyplot as plt

    plt.close("all")
    result = compute(_profile(), Goal(target_weight=62.0), date(2026, 1, 5))
    render_progress_chart(result, "kg", initial_weight=75.0, target_weight=62.0)
    assert plt.get_fignums() == []
