from typing import List, Protocol

from vitale.application.schemas import LeadInteraction, MemberAssessmentEntry, SubmissionResult
from vitale.domain.models import AssessmentRecord, MetricSample, VitalsSample


class PersistenceError(Exception):
    """Raised by repository adapters when a read or write does not go through."""


class HealthRecordRepository(Protocol):
    def save_lead_interaction(self, interaction: LeadInteraction) -> None:
        ...

    def save_member_assessment(self, profile_id: str, entry: MemberAssessmentEntry) -> MemberAssessmentEntry:
        ...

    def add_metric(self, profile_id: str, sample: MetricSample) -> None:
        ...

    def add_vitals(self, profile_id: str, sample: VitalsSample) -> None:
        ...

    def list_metrics(self, profile_id: str) -> List[MetricSample]:
        """Newest first."""
        ...

    def list_vitals(self, profile_id: str) -> List[VitalsSample]:
        """Newest first."""
        ...

    def list_member_assessments(self, profile_id: str) -> List[MemberAssessmentEntry]:
        """Newest first."""
        ...


class AssessmentSubmitter(Protocol):
    def submit(self, record: AssessmentRecord) -> SubmissionResult:
        ...
