import logging
import math
import re
from datetime import date, timedelta
from typing import List, Optional, Tuple, Union

from models import CalculationResult, Goal, ProjectionPoint, UserProfile

logger = logging.getLogger(__name__)


ACTIVITY_MAP = {
    "Sedentary": 1.2,
    "Lightly active": 1.375,
    "Moderately active": 1.55,
    "Very active": 1.725,
    "Super active": 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = ACTIVITY_MAP["Lightly active"]

SEX_OPTIONS = ("Female", "Male")
HEIGHT_UNITS = ("cm", "ft/in")
WEIGHT_UNITS = ("kg", "lb")

WEEKLY_LOSS_RATE_KG = 0.45
DEFAULT_DAILY_DEFICIT = 500

FT_TO_CM = 30.48
LB_TO_KG = 0.453592
KG_TO_LB = 2.20462

INVALID_NUMBERS_MESSAGE = (
    "Please enter valid numbers for age, height, weight, and target weight."
)

# Upper bound for weight and target weight in either unit. The projection
# has one entry per 0.45 kg, so this also bounds its length.
MAX_WEIGHT = 2000

# ASCII digits only, no underscores.
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


class InvalidInput(ValueError):
    """Raised when form values cannot be turned into a profile and goal."""

    def __init__(self, message: str, fields: Tuple[str, ...] = ()):
        super().__init__(message)
        self.fields = fields


def _parse_int(raw) -> int:
    if isinstance(raw, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"not an integer: {text!r}")
    return int(text)


def _parse_float(raw) -> float:
    if isinstance(raw, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not _FLOAT_PATTERN.fullmatch(text):
            raise ValueError(f"not a number: {text!r}")
        value = float(text)
    if not math.isfinite(value):
        raise ValueError("value must be finite")
    return value


def _parse_date(raw) -> Optional[date]:
    if raw is None or isinstance(raw, date):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    return date.fromisoformat(text)


def parse_inputs(
    age,
    sex: str,
    height,
    height_unit: str,
    weight,
    weight_unit: str,
    target_weight,
    activity_level: str,
    target_date: Union[date, str, None] = None,
) -> Tuple[UserProfile, Goal]:
    """
    Turn raw form values into a UserProfile and Goal.

    Numbers may arrive as text. Age must be an integer; height, weight and
    target weight must be finite reals written with ASCII digits. All four
    must be strictly positive; weights may not exceed MAX_WEIGHT.
    Raises InvalidInput naming every field that failed.
    """
    bad: List[str] = []
    parsed = {}

    for name, raw, parser in (
        ("age", age, _parse_int),
        ("height", height, _parse_float),
        ("weight", weight, _parse_float),
        ("target_weight", target_weight, _parse_float),
    ):
        try:
            value = parser(raw)
        except (TypeError, ValueError):
            bad.append(name)
            continue
        if value <= 0:
            bad.append(name)
            continue
        if name in ("weight", "target_weight") and value > MAX_WEIGHT:
            bad.append(name)
            continue
        parsed[name] = value

    if bad:
        raise InvalidInput(
            f"{INVALID_NUMBERS_MESSAGE} Check: {', '.join(bad)}.", tuple(bad)
        )

    try:
        goal_date = _parse_date(target_date)
    except ValueError as exc:
        raise InvalidInput(
            "Please enter a valid target date.", ("target_date",)
        ) from exc

    if sex not in SEX_OPTIONS:
        raise InvalidInput(f"Unknown sex: {sex!r}", ("sex",))
    if height_unit not in HEIGHT_UNITS:
        raise InvalidInput(f"Unknown height unit: {height_unit!r}", ("height_unit",))
    if weight_unit not in WEIGHT_UNITS:
        raise InvalidInput(f"Unknown weight unit: {weight_unit!r}", ("weight_unit",))

    profile = UserProfile(
        age=parsed["age"],
        sex=sex,
        height=parsed["height"],
        height_unit=height_unit,
        weight=parsed["weight"],
        weight_unit=weight_unit,
        activity_level=activity_level,
    )
    goal = Goal(target_weight=parsed["target_weight"], target_date=goal_date)
    return profile, goal


def to_display_weight(weight_kg: float, unit: str) -> float:
    if unit == "lb":
        return weight_kg * KG_TO_LB
    return weight_kg


class CalorieCalculator:
    """
    Core logic:
    - Convert units (everything below works in kg / cm)
    - Compute BMR (Mifflin-St Jeor)
    - Apply activity factor -> TDEE
    - Default intake is TDEE - 500 kcal (~0.45 kg/week)
    - A target date that needs a faster rate deepens the deficit
    - Project the weight week by week until the goal
    """

    def _weight_kg(self, weight: float, unit: str) -> float:
        if unit == "lb":
            return weight * LB_TO_KG
        return weight

    def _height_cm(self, height: float, unit: str) -> float:
        # "ft/in" is a single decimal number scaled as feet
        if unit == "ft/in":
            return height * FT_TO_CM
        return height

    def _bmr(self, sex: str, age: int, weight_kg: float, height_cm: float) -> float:
        base = 10 * weight_kg + 6.25 * height_cm - 5 * age
        if sex == "Female":
            return base - 161
        return base + 5

    def _activity_multiplier(self, activity_level: str) -> float:
        return ACTIVITY_MAP.get(activity_level, DEFAULT_ACTIVITY_MULTIPLIER)

    def _daily_intake(
        self,
        tdee: float,
        total_weight_loss_kg: float,
        target_date: Optional[date],
        today: date,
    ) -> float:
        intake = tdee - DEFAULT_DAILY_DEFICIT
        if target_date is None:
            return intake

        remaining_days = (target_date - today).days
        whole_weeks = remaining_days // 7
        if whole_weeks < 1:
            logger.warning(
                "Target date %s is less than a week away (%d days); "
                "keeping the default deficit",
                target_date,
                remaining_days,
            )
            return intake

        target_weekly_loss = total_weight_loss_kg / whole_weeks
        if target_weekly_loss > WEEKLY_LOSS_RATE_KG:
            intake = tdee - DEFAULT_DAILY_DEFICIT * (
                target_weekly_loss / WEEKLY_LOSS_RATE_KG
            )
        return intake

    def _projection(
        self, weight_kg: float, weeks: int, today: date
    ) -> List[ProjectionPoint]:
        return [
            ProjectionPoint(
                day=today + timedelta(weeks=week),
                weight_kg=weight_kg - week * WEEKLY_LOSS_RATE_KG,
            )
            for week in range(weeks)
        ]

    def compute(
        self, profile: UserProfile, goal: Goal, today: Optional[date] = None
    ) -> CalculationResult:
        if today is None:
            today = date.today()

        # Conversions
        height_cm = self._height_cm(profile.height, profile.height_unit)
        weight_kg = self._weight_kg(profile.weight, profile.weight_unit)
        target_weight_kg = self._weight_kg(goal.target_weight, profile.weight_unit)

        # BMR / TDEE
        bmr = self._bmr(profile.sex, profile.age, weight_kg, height_cm)
        multiplier = self._activity_multiplier(profile.activity_level)
        tdee = bmr * multiplier

        # Goal
        total_weight_loss_kg = weight_kg - target_weight_kg
        weeks_to_goal = total_weight_loss_kg / WEEKLY_LOSS_RATE_KG
        whole_weeks = math.floor(weeks_to_goal)

        intake = self._daily_intake(tdee, total_weight_loss_kg, goal.target_date, today)

        # lies in the past when the target is above the current weight
        if goal.target_date is not None:
            completion = goal.target_date
        else:
            completion = today + timedelta(weeks=whole_weeks)

        logger.debug(
            "bmr=%.2f tdee=%.2f intake=%.2f weeks_to_goal=%.2f",
            bmr,
            tdee,
            intake,
            weeks_to_goal,
        )

        return CalculationResult(
            bmr=bmr,
            tdee=tdee,
            activity_multiplier=multiplier,
            height_cm=height_cm,
            weight_kg=weight_kg,
            target_weight_kg=target_weight_kg,
            total_weight_loss_kg=total_weight_loss_kg,
            weeks_to_goal=weeks_to_goal,
            daily_caloric_intake=intake,
            estimated_completion_date=completion,
            weekly_projection=self._projection(weight_kg, max(whole_weeks, 0), today),
        )


_default_calculator = CalorieCalculator()


def compute(
    profile: UserProfile, goal: Goal, today: Optional[date] = None
) -> CalculationResult:
    return _default_calculator.compute(profile, goal, today)


def format_result(result: CalculationResult) -> List[str]:
    """Result lines as shown under the form."""
    completion = result.estimated_completion_date.strftime("%b %d, %Y")
    return [
        f"Daily Caloric Intake: {result.daily_caloric_intake:.0f} kcal",
        f"Estimated Date to Reach Target Weight: {completion}",
    ]
