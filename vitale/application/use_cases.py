import logging
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from vitale.application.ports import HealthRecordRepository, PersistenceError
from vitale.application.schemas import (
    HealthDashboard,
    LeadInteraction,
    MemberAssessmentEntry,
    SubmissionResult,
)
from vitale.domain.alerts import AlertThresholds, evaluate_alerts
from vitale.domain.models import AssessmentRecord, MetricSample, VitalsSample
from vitale.domain.recommendation import RecommendationPolicy, recommend
from vitale.domain.scoring import score_engagement
from vitale.domain.vocabulary import HEALTH_GOALS, LIFESTYLE_FACTORS, SYMPTOMS, in_vocabulary_order


logger = logging.getLogger(__name__)


# Temperature stored with a blood pressure reading when none was measured.
DEFAULT_BODY_TEMPERATURE_C = 36.8


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_number(raw: str, label: str) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s value: %r", label, raw)
        return None
    if not math.isfinite(value):
        logger.warning("Ignoring non-finite %s value: %r", label, raw)
        return None
    return value


def record_to_content(record: AssessmentRecord) -> dict:
    content = {
        "symptoms": in_vocabulary_order(record.symptoms, SYMPTOMS),
        "lifestyle": in_vocabulary_order(record.lifestyle_factors, LIFESTYLE_FACTORS),
        "goals": in_vocabulary_order(record.goals, HEALTH_GOALS),
        "physical_health": record.physical_health.model_dump(),
        "mental_health": record.mental_health.model_dump(),
        "vital_signs": record.vitals_input.model_dump(),
    }
    if record.personal_info is not None:
        info = record.personal_info
        content["personal_info"] = {
            "first_name": info.first_name,
            "last_name": info.last_name,
            "phone": info.phone,
        }
    return content


def build_lead_interaction(record: AssessmentRecord, score: int, recommendation: str) -> LeadInteraction:
    email = record.personal_info.email.strip().lower() if record.personal_info else ""
    return LeadInteraction(
        lead_id=email,
        content=record_to_content(record),
        engagement_score=score,
        ai_response=recommendation,
    )


def build_member_entry(record: AssessmentRecord) -> MemberAssessmentEntry:
    physical = record.physical_health
    mental = record.mental_health
    lifestyle = ", ".join(in_vocabulary_order(record.lifestyle_factors, LIFESTYLE_FACTORS))
    return MemberAssessmentEntry(
        symptoms=", ".join(in_vocabulary_order(record.symptoms, SYMPTOMS)),
        history=f"Exercise: {physical.exercise_frequency}, Sleep: {physical.sleep_quality}",
        goals=", ".join(in_vocabulary_order(record.goals, HEALTH_GOALS)),
        physical_health=f"Energy Level: {physical.energy_level}, Lifestyle: {lifestyle}",
        mental_health=(
            f"Stress: {mental.stress_level}, Mood: {mental.mood_stability}, Anxiety: {mental.anxiety_level}"
        ),
    )


def derive_samples(record: AssessmentRecord, measured_at: datetime) -> Tuple[List[MetricSample], List[VitalsSample]]:
    """Turn self-reported vitals into the samples the alert history is built from."""
    vitals_input = record.vitals_input
    metrics: List[MetricSample] = []
    vitals: List[VitalsSample] = []

    weight = _parse_number(vitals_input.weight, "weight")
    if weight is not None:
        metrics.append(MetricSample(metric_type="weight", value=weight, unit="kg", measured_at=measured_at))

    heart_rate = _parse_number(vitals_input.resting_heart_rate, "resting heart rate")
    if heart_rate is not None:
        metrics.append(MetricSample(metric_type="heart_rate", value=heart_rate, unit="bpm", measured_at=measured_at))

    if vitals_input.blood_pressure:
        vitals.append(VitalsSample(
            temperature=DEFAULT_BODY_TEMPERATURE_C,
            heart_rate=round(heart_rate) if heart_rate is not None else None,
            blood_pressure=vitals_input.blood_pressure,
            measured_at=measured_at,
        ))
    return metrics, vitals


class SubmitLeadAssessmentUseCase:
    """Scores a lead's finished assessment and stores it as a lead interaction."""

    def __init__(self, repository: HealthRecordRepository, policy: Optional[RecommendationPolicy] = None):
        self.repository = repository
        self.policy = policy

    def submit(self, record: AssessmentRecord) -> SubmissionResult:
        score = score_engagement(record)
        recommendation = recommend(record, self.policy)
        interaction = build_lead_interaction(record, score, recommendation.message)
        try:
            self.repository.save_lead_interaction(interaction)
        except PersistenceError as e:
            logger.exception("Saving lead assessment for %s failed: %s", interaction.lead_id, e)
            return SubmissionResult(success=False, error="Error submitting assessment. Please try again.")
        return SubmissionResult(
            success=True,
            engagement_score=score,
            tier=recommendation.tier,
            recommendation=recommendation.message,
        )


class SubmitMemberAssessmentUseCase:
    """Stores a signed-in member's assessment plus the vitals it reports."""

    def __init__(
        self,
        repository: HealthRecordRepository,
        profile_id: str,
        policy: Optional[RecommendationPolicy] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.profile_id = profile_id
        self.policy = policy
        self.clock = clock

    def submit(self, record: AssessmentRecord) -> SubmissionResult:
        score = score_engagement(record)
        recommendation = recommend(record, self.policy)
        metrics, vitals = derive_samples(record, self.clock())
        try:
            self.repository.save_member_assessment(self.profile_id, build_member_entry(record))
            for metric in metrics:
                self.repository.add_metric(self.profile_id, metric)
            for sample in vitals:
                self.repository.add_vitals(self.profile_id, sample)
        except PersistenceError as e:
            logger.exception("Saving assessment for profile %s failed: %s", self.profile_id, e)
            return SubmissionResult(success=False, error="Failed to submit health assessment")
        return SubmissionResult(
            success=True,
            engagement_score=score,
            tier=recommendation.tier,
            recommendation=recommendation.message,
        )


class LoadHealthDashboardUseCase:
    """Reads a profile's history and derives the current alerts from it."""

    def __init__(self, repository: HealthRecordRepository, thresholds: Optional[AlertThresholds] = None):
        self.repository = repository
        self.thresholds = thresholds

    def load(self, profile_id: str) -> HealthDashboard:
        try:
            metrics = self.repository.list_metrics(profile_id)
            vitals = self.repository.list_vitals(profile_id)
            assessments = self.repository.list_member_assessments(profile_id)
        except PersistenceError as e:
            logger.exception("Loading health data for profile %s failed: %s", profile_id, e)
            return HealthDashboard(success=False, error="Failed to load health data")

        alerts = evaluate_alerts(metrics, vitals, self.thresholds)
        return HealthDashboard(
            success=True,
            metrics=metrics,
            vitals=vitals,
            alerts=alerts,
            latest_assessment=assessments[0] if assessments else None,
        )
