from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from vitale.domain.models import Alert, MetricSample, VitalsSample
from vitale.domain.recommendation import CareTier


class SubmissionResult(BaseModel):
    success: bool
    engagement_score: Optional[int] = None
    tier: Optional[CareTier] = None
    recommendation: Optional[str] = None
    error: Optional[str] = None


class LeadInteraction(BaseModel):
    lead_id: str
    interaction_type: str = "assessment"
    content: dict
    engagement_score: int = Field(..., ge=0, le=100)
    ai_response: str


class MemberAssessmentEntry(BaseModel):
    id: Optional[str] = None
    symptoms: str = ""
    history: str = ""
    goals: str = ""
    physical_health: str = ""
    mental_health: str = ""
    created_at: Optional[datetime] = None


class HealthDashboard(BaseModel):
    success: bool
    metrics: List[MetricSample] = []
    vitals: List[VitalsSample] = []
    alerts: List[Alert] = []
    latest_assessment: Optional[MemberAssessmentEntry] = None
    error: Optional[str] = None
