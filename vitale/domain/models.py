from datetime import datetime
from typing import FrozenSet, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .vocabulary import ANSWER_DOMAINS, TAG_VOCABULARIES


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _check_answer(field_name: str, value: str) -> str:
    value = (value or "").strip()
    if value and value not in ANSWER_DOMAINS[field_name]:
        raise ValueError(f"'{value}' is not a valid answer for {field_name}")
    return value


class PhysicalHealth(_Frozen):
    exercise_frequency: str = ""
    sleep_quality: str = ""
    energy_level: str = ""

    @field_validator("exercise_frequency", "sleep_quality", "energy_level")
    @classmethod
    def validate_answer(cls, v: str, info):
        return _check_answer(info.field_name, v)


class MentalHealth(_Frozen):
    stress_level: str = ""
    mood_stability: str = ""
    anxiety_level: str = ""

    @field_validator("stress_level", "mood_stability", "anxiety_level")
    @classmethod
    def validate_answer(cls, v: str, info):
        return _check_answer(info.field_name, v)


class VitalsInput(_Frozen):
    """Self-reported vitals exactly as typed; any of them may be blank."""

    weight: str = ""
    height: str = ""
    blood_pressure: str = ""
    resting_heart_rate: str = ""

    @field_validator("weight", "height", "blood_pressure", "resting_heart_rate")
    @classmethod
    def strip_value(cls, v: str):
        return (v or "").strip()


class PersonalInfo(_Frozen):
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str = ""


class AssessmentRecord(_Frozen):
    symptoms: FrozenSet[str] = frozenset()
    lifestyle_factors: FrozenSet[str] = frozenset()
    goals: FrozenSet[str] = frozenset()
    physical_health: PhysicalHealth = PhysicalHealth()
    mental_health: MentalHealth = MentalHealth()
    vitals_input: VitalsInput = VitalsInput()
    personal_info: Optional[PersonalInfo] = None

    @field_validator("symptoms", "lifestyle_factors", "goals")
    @classmethod
    def validate_tags(cls, v: FrozenSet[str], info):
        vocabulary = TAG_VOCABULARIES[info.field_name]
        unknown = sorted(t for t in v if t not in vocabulary)
        if unknown:
            raise ValueError(f"unknown {info.field_name} tag(s): {', '.join(unknown)}")
        return v


def empty_draft(with_contact: bool = False) -> AssessmentRecord:
    return AssessmentRecord(personal_info=PersonalInfo() if with_contact else None)


class VitalsSample(_Frozen):
    temperature: float
    heart_rate: Optional[int] = None
    blood_pressure: str = ""
    measured_at: datetime


class MetricSample(_Frozen):
    metric_type: str
    value: float
    unit: str = ""
    measured_at: datetime


class Alert(_Frozen):
    id: str
    kind: Literal["vital", "metric"]
    severity: Literal["low", "medium", "high"]
    message: str
    recommendation: str
    detected_at: datetime = Field(..., description="Timestamp of the sample that triggered the alert")
