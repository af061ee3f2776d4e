import logging
from enum import Enum
from typing import Callable, FrozenSet, List, Tuple

from pydantic import BaseModel

from .models import AssessmentRecord


logger = logging.getLogger(__name__)


class CareTier(str, Enum):
    ESSENTIAL = "essential"
    PREMIUM = "premium"
    ELITE = "elite"


TIER_MESSAGES = {
    CareTier.ELITE: (
        "Based on your comprehensive assessment, I strongly recommend our Elite Care membership. "
        "Your combination of symptoms, lifestyle factors, and current health status suggests you would "
        "benefit from our most comprehensive care package, including priority specialist access and "
        "advanced wellness programs."
    ),
    CareTier.PREMIUM: (
        "Based on your assessment, our Premium Care membership would be ideal, offering the comprehensive "
        "health monitoring and priority access to specialists you need."
    ),
    CareTier.ESSENTIAL: (
        "Our Essential Care membership would be an excellent foundation for your preventive health goals, "
        "providing the support and guidance you need to maintain optimal wellness."
    ),
}


class RecommendationPolicy(BaseModel):
    symptom_threshold: int = 3
    concern_lifestyle_tags: FrozenSet[str] = frozenset({"High Stress", "Poor Sleep"})
    concern_stress_level: str = "High"
    concern_anxiety_level: str = "High"


class Recommendation(BaseModel):
    tier: CareTier
    message: str


def has_many_symptoms(record: AssessmentRecord, policy: RecommendationPolicy) -> bool:
    return len(record.symptoms) >= policy.symptom_threshold


def has_lifestyle_concern(record: AssessmentRecord, policy: RecommendationPolicy) -> bool:
    return bool(record.lifestyle_factors & policy.concern_lifestyle_tags)


def has_mental_health_concern(record: AssessmentRecord, policy: RecommendationPolicy) -> bool:
    mental = record.mental_health
    return (
        mental.stress_level == policy.concern_stress_level
        or mental.anxiety_level == policy.concern_anxiety_level
    )


Predicate = Callable[[AssessmentRecord, RecommendationPolicy], bool]

# Evaluated top-down, first match wins. ESSENTIAL is the fallback.
RECOMMENDATION_RULES: List[Tuple[CareTier, Predicate]] = [
    (
        CareTier.ELITE,
        lambda r, p: has_many_symptoms(r, p) and (has_lifestyle_concern(r, p) or has_mental_health_concern(r, p)),
    ),
    (
        CareTier.PREMIUM,
        lambda r, p: has_many_symptoms(r, p) or has_lifestyle_concern(r, p) or has_mental_health_concern(r, p),
    ),
]


def recommend(record: AssessmentRecord, policy: RecommendationPolicy | None = None) -> Recommendation:
    policy = policy or RecommendationPolicy()
    tier = CareTier.ESSENTIAL
    for candidate, predicate in RECOMMENDATION_RULES:
        if predicate(record, policy):
            tier = candidate
            break
    logger.debug("Recommended %s tier", tier.value)
    return Recommendation(tier=tier, message=TIER_MESSAGES[tier])
