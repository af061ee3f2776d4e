import math
from typing import Callable, List, Tuple

from .models import AssessmentRecord


MAX_ENGAGEMENT_SCORE = 100


def _answered(value: str) -> int:
    return 1 if value else 0


# (weight, how many units of that weight the record earns)
ENGAGEMENT_WEIGHTS: List[Tuple[float, Callable[[AssessmentRecord], int]]] = [
    (2, lambda r: len(r.symptoms)),
    (1, lambda r: len(r.lifestyle_factors)),
    (1.5, lambda r: len(r.goals)),
    (5, lambda r: _answered(r.physical_health.exercise_frequency)),
    (5, lambda r: _answered(r.physical_health.sleep_quality)),
    (5, lambda r: _answered(r.physical_health.energy_level)),
    (5, lambda r: _answered(r.mental_health.stress_level)),
    (5, lambda r: _answered(r.mental_health.mood_stability)),
    (5, lambda r: _answered(r.mental_health.anxiety_level)),
    (2, lambda r: _answered(r.vitals_input.weight)),
    (2, lambda r: _answered(r.vitals_input.height)),
    (3, lambda r: _answered(r.vitals_input.blood_pressure)),
    (3, lambda r: _answered(r.vitals_input.resting_heart_rate)),
]


def score_engagement(record: AssessmentRecord) -> int:
    """
    Weighted count of how much of the assessment was filled in.

    Returns an integer in [0, 100]. Half points from goals are floored.
    """
    total = sum(weight * count(record) for weight, count in ENGAGEMENT_WEIGHTS)
    return int(math.floor(min(total, MAX_ENGAGEMENT_SCORE)))
