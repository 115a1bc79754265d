from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass(frozen=True)
class UserProfile:
    age: int
    sex: str                   # Female, Male
    height: float
    height_unit: str           # cm, ft/in
    weight: float
    weight_unit: str           # kg, lb (also used for the target weight)
    activity_level: str        # Sedentary, Lightly active, ...


@dataclass(frozen=True)
class Goal:
    target_weight: float
    target_date: Optional[date] = None


@dataclass(frozen=True)
class ProjectionPoint:
    day: date
    weight_kg: float


@dataclass(frozen=True)
class CalculationResult:
    bmr: float
    tdee: float
    activity_multiplier: float

    height_cm: float
    weight_kg: float
    target_weight_kg: float

    total_weight_loss_kg: float
    weeks_to_goal: float
    daily_caloric_intake: float
    estimated_completion_date: date

    weekly_projection: List[ProjectionPoint] = field(default_factory=list)

    @property
    def has_projection(self) -> bool:
        return bool(self.weekly_projection)
