import logging
from typing import Callable, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from vitale.application.ports import AssessmentSubmitter
from vitale.application.schemas import SubmissionResult
from vitale.application.validators import validate_contact_step, validate_nothing
from vitale.domain.models import (
    AssessmentRecord,
    MentalHealth,
    PersonalInfo,
    PhysicalHealth,
    VitalsInput,
    empty_draft,
)
from vitale.domain.vocabulary import TAG_VOCABULARIES


logger = logging.getLogger(__name__)


FlowVariant = Literal["lead", "member"]
TagGroup = Literal["symptoms", "lifestyle_factors", "goals"]


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class SetContact(_Action):
    field: Literal["email", "first_name", "last_name", "phone"]
    value: str


class SetVitals(_Action):
    field: Literal["weight", "height", "blood_pressure", "resting_heart_rate"]
    value: str


class SetPhysicalHealth(_Action):
    field: Literal["exercise_frequency", "sleep_quality", "energy_level"]
    value: str


class SetMentalHealth(_Action):
    field: Literal["stress_level", "mood_stability", "anxiety_level"]
    value: str


class ToggleTag(_Action):
    group: TagGroup
    tag: str


class Next(_Action):
    pass


class Prev(_Action):
    pass


class Reset(_Action):
    pass


class SubmissionSucceeded(_Action):
    pass


class SubmissionFailed(_Action):
    error: str


WizardAction = Union[
    SetContact, SetVitals, SetPhysicalHealth, SetMentalHealth, ToggleTag,
    Next, Prev, Reset, SubmissionSucceeded, SubmissionFailed,
]


class StepDefinition(BaseModel):
    key: str
    title: str
    sections: Tuple[str, ...]
    validate_step: Callable[[AssessmentRecord], Dict[str, str]] = validate_nothing


FLOWS: Dict[str, List[StepDefinition]] = {
    "lead": [
        StepDefinition(key="contact", title="Start Your Assessment", sections=("personal_info",),
                       validate_step=validate_contact_step),
        StepDefinition(key="physical", title="Physical Health Assessment",
                       sections=("vitals_input", "physical_health")),
        StepDefinition(key="mental", title="Mental Health Assessment", sections=("mental_health",)),
        StepDefinition(key="lifestyle", title="Symptoms, Lifestyle & Goals",
                       sections=("symptoms", "lifestyle_factors", "goals")),
    ],
    "member": [
        StepDefinition(key="symptoms", title="Current Symptoms", sections=("symptoms",)),
        StepDefinition(key="physical", title="Lifestyle & Physical Health",
                       sections=("lifestyle_factors", "physical_health")),
        StepDefinition(key="mental", title="Mental Health", sections=("mental_health",)),
        StepDefinition(key="goals", title="Health Goals & Vital Signs", sections=("goals", "vitals_input")),
    ],
}


class WizardState(BaseModel):
    model_config = ConfigDict(frozen=True)

    flow: FlowVariant = "lead"
    step: int = 1
    draft: AssessmentRecord = AssessmentRecord()
    status: Literal["editing", "submitting", "submitted"] = "editing"
    errors: Dict[str, str] = {}
    submission_error: Optional[str] = None

    @property
    def steps(self) -> List[StepDefinition]:
        return FLOWS[self.flow]

    @property
    def max_step(self) -> int:
        return len(self.steps)

    @property
    def current_step(self) -> StepDefinition:
        return self.steps[self.step - 1]

    @property
    def is_last_step(self) -> bool:
        return self.step == self.max_step


def initial_state(flow: FlowVariant = "lead") -> WizardState:
    return WizardState(flow=flow, draft=empty_draft(with_contact=(flow == "lead")))


def _without(errors: Dict[str, str], key: str) -> Dict[str, str]:
    return {k: v for k, v in errors.items() if k != key}


def _field_error(exc: ValidationError) -> str:
    return exc.errors()[0]["msg"].removeprefix("Value error, ")


def _replace_section(state: WizardState, section: str, model_cls, field: str, value: str) -> WizardState:
    current = getattr(state.draft, section) or model_cls()
    try:
        updated = model_cls(**{**current.model_dump(), field: value})
    except ValidationError as e:
        return state.model_copy(update={"errors": {**state.errors, field: _field_error(e)}})
    return state.model_copy(update={
        "draft": state.draft.model_copy(update={section: updated}),
        "errors": _without(state.errors, field),
    })


def _toggle(state: WizardState, group: str, tag: str) -> WizardState:
    if tag not in TAG_VOCABULARIES[group]:
        return state.model_copy(update={"errors": {**state.errors, group: f"Unknown option: {tag}"}})
    tags = getattr(state.draft, group)
    return state.model_copy(update={
        "draft": state.draft.model_copy(update={group: tags ^ {tag}}),
        "errors": _without(state.errors, group),
    })


def _advance(state: WizardState) -> WizardState:
    errors = state.current_step.validate_step(state.draft)
    if errors:
        return state.model_copy(update={"errors": errors})
    if not state.is_last_step:
        return state.model_copy(update={"step": state.step + 1, "errors": {}})
    return state.model_copy(update={"status": "submitting", "errors": {}, "submission_error": None})


def transition(state: WizardState, action: WizardAction) -> WizardState:
    """
    Pure wizard reducer: returns the state that follows `action`.

    Navigation past either end is clamped. `Next` on the last step moves the
    wizard into "submitting" without touching step or draft; the caller performs
    the submission and reports back with SubmissionSucceeded / SubmissionFailed.
    """
    if state.status == "submitted":
        return initial_state(state.flow) if isinstance(action, Reset) else state

    if state.status == "submitting":
        if isinstance(action, SubmissionSucceeded):
            return state.model_copy(update={"status": "submitted"})
        if isinstance(action, SubmissionFailed):
            return state.model_copy(update={"status": "editing", "submission_error": action.error})
        return state

    if isinstance(action, SetContact):
        if state.flow == "member":
            return state
        return _replace_section(state, "personal_info", PersonalInfo, action.field, action.value)
    if isinstance(action, SetVitals):
        return _replace_section(state, "vitals_input", VitalsInput, action.field, action.value)
    if isinstance(action, SetPhysicalHealth):
        return _replace_section(state, "physical_health", PhysicalHealth, action.field, action.value)
    if isinstance(action, SetMentalHealth):
        return _replace_section(state, "mental_health", MentalHealth, action.field, action.value)
    if isinstance(action, ToggleTag):
        return _toggle(state, action.group, action.tag)
    if isinstance(action, Next):
        return _advance(state)
    if isinstance(action, Prev):
        if state.step <= 1:
            return state
        return state.model_copy(update={"step": state.step - 1, "errors": {}})
    if isinstance(action, Reset):
        return initial_state(state.flow)
    return state


class IntakeWizard:
    """Holds one session's wizard state and runs the submission when it is due."""

    def __init__(self, submitter: AssessmentSubmitter, flow: FlowVariant = "lead"):
        self.submitter = submitter
        self.state = initial_state(flow)
        self.last_result: Optional[SubmissionResult] = None

    @property
    def step(self) -> int:
        return self.state.step

    @property
    def draft(self) -> AssessmentRecord:
        return self.state.draft

    @property
    def errors(self) -> Dict[str, str]:
        return self.state.errors

    @property
    def is_submitted(self) -> bool:
        return self.state.status == "submitted"

    def dispatch(self, action: WizardAction) -> WizardState:
        previous = self.state
        self.state = transition(previous, action)
        if previous.status != "submitting" and self.state.status == "submitting":
            self._run_submission()
        return self.state

    def set_contact(self, field: str, value: str) -> WizardState:
        return self.dispatch(SetContact(field=field, value=value))

    def set_vitals(self, field: str, value: str) -> WizardState:
        return self.dispatch(SetVitals(field=field, value=value))

    def set_physical_health(self, field: str, value: str) -> WizardState:
        return self.dispatch(SetPhysicalHealth(field=field, value=value))

    def set_mental_health(self, field: str, value: str) -> WizardState:
        return self.dispatch(SetMentalHealth(field=field, value=value))

    def toggle(self, group: str, tag: str) -> WizardState:
        return self.dispatch(ToggleTag(group=group, tag=tag))

    def next(self) -> WizardState:
        return self.dispatch(Next())

    def prev(self) -> WizardState:
        return self.dispatch(Prev())

    def reset(self) -> WizardState:
        self.last_result = None
        return self.dispatch(Reset())

    def _run_submission(self) -> None:
        record = self.state.draft
        try:
            result = self.submitter.submit(record)
        except Exception as e:
            logger.exception("Assessment submission raised: %s", e)
            result = SubmissionResult(success=False, error="Submission failed. Please try again.")
        self.last_result = result
        if result.success:
            logger.info("Assessment submitted (score=%s, tier=%s)", result.engagement_score, result.tier)
            self.state = transition(self.state, SubmissionSucceeded())
        else:
            logger.warning("Assessment submission failed: %s", result.error)
            self.state = transition(self.state, SubmissionFailed(error=result.error or "Submission failed"))
