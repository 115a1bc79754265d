from io import BytesIO

from matplotlib.figure import Figure

from calculator import to_display_weight
from models import CalculationResult

BAR_WIDTH_IN = 0.6
MIN_WIDTH_IN = 4.0
HEIGHT_IN = 3.0


def render_progress_chart(
    result: CalculationResult,
    weight_unit: str,
    initial_weight: float,
    target_weight: float,
) -> bytes:
    """
    Bar chart of the weekly projection as PNG bytes.

    Bars are drawn in the display unit; the y axis spans the target and
    initial weights exactly as the user entered them. Draws on a standalone
    Figure, never through pyplot.
    """
    if not result.has_projection:
        raise ValueError("no weekly projection to plot")

    labels = [point.day.strftime("%b %d") for point in result.weekly_projection]
    values = [
        to_display_weight(point.weight_kg, weight_unit)
        for point in result.weekly_projection
    ]

    width = max(len(values) * BAR_WIDTH_IN, MIN_WIDTH_IN)
    fig = Figure(figsize=(width, HEIGHT_IN), dpi=100)
    ax = fig.subplots()
    bars = ax.bar(range(len(values)), values, color="#1f77b4")
    ax.bar_label(bars, labels=[f"{v:.1f} {weight_unit}" for v in values], fontsize=7)
    ax.set_xticks(range(len(values)))
    ax.set_xticklabels(labels, rotation=45, fontsize=8)
    ax.set_ylim(min(target_weight, initial_weight), max(target_weight, initial_weight))
    ax.set_title("Weekly Weight Progress")
    ax.set_ylabel(f"Weight, {weight_unit}")
    ax.grid(True, axis="y", alpha=0.3)

    buffer = BytesIO()
    fig.tight_layout()
    fig.savefig(buffer, format="png")
    buffer.seek(0)
    return buffer.read()
