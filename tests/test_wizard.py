"""Tests for the intake wizard state machine."""
from unittest.mock import MagicMock

import pytest

from vitale.application.schemas import SubmissionResult
from vitale.application.use_cases import SubmitMemberAssessmentUseCase
from vitale.application.wizard import (
    FLOWS,
    IntakeWizard,
    Next,
    Prev,
    Reset,
    SetContact,
    SetMentalHealth,
    SetPhysicalHealth,
    SetVitals,
    SubmissionFailed,
    SubmissionSucceeded,
    ToggleTag,
    initial_state,
    transition,
)
from vitale.domain.models import AssessmentRecord
from vitale.domain.recommendation import CareTier


class RecordingSubmitter:
    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls = []

    def submit(self, record: AssessmentRecord) -> SubmissionResult:
        self.calls.append(record)
        if self.results:
            return self.results.pop(0)
        return SubmissionResult(success=True, engagement_score=10, tier=CareTier.ESSENTIAL, recommendation="ok")


def fill_contact(state):
    for field, value in [("email", "jane@example.com"), ("first_name", "Jane"), ("last_name", "Doe")]:
        state = transition(state, SetContact(field=field, value=value))
    return state


def at_last_step(flow="lead"):
    state = initial_state(flow)
    if flow == "lead":
        state = fill_contact(state)
    for _ in range(len(FLOWS[flow]) - 1):
        state = transition(state, Next())
    return state


class TestNavigation:
    """Step movement and clamping."""

    def test_initial_state(self):
        state = initial_state()
        assert state.step == 1
        assert state.status == "editing"
        assert state.draft.symptoms == frozenset()
        assert state.draft.personal_info is not None

    def test_prev_at_first_step_is_noop(self):
        state = initial_state()
        assert transition(state, Prev()) == state

    def test_next_then_prev(self):
        state = fill_contact(initial_state())
        state = transition(state, Next())
        assert state.step == 2
        state = transition(state, Prev())
        assert state.step == 1
        assert state.draft.personal_info.first_name == "Jane"

    def test_member_flow_has_no_required_fields(self):
        state = initial_state("member")
        assert state.draft.personal_info is None
        for expected in [2, 3, 4]:
            state = transition(state, Next())
            assert state.step == expected
            assert state.errors == {}

    def test_both_flows_have_four_steps(self):
        assert len(FLOWS["lead"]) == 4
        assert len(FLOWS["member"]) == 4
        assert FLOWS["lead"][0].key == "contact"
        assert FLOWS["member"][0].key == "symptoms"


class TestValidation:
    """Required contact fields block advancement."""

    def test_blank_contact_blocks_next(self):
        state = transition(initial_state(), Next())
        assert state.step == 1
        assert set(state.errors) == {"email", "first_name", "last_name"}

    def test_malformed_email_blocks_next(self):
        state = fill_contact(initial_state())
        state = transition(state, SetContact(field="email", value="jane-at-example"))
        state = transition(state, Next())
        assert state.step == 1
        assert list(state.errors) == ["email"]

    def test_phone_is_optional(self):
        state = transition(fill_contact(initial_state()), Next())
        assert state.step == 2
        assert state.errors == {}

    def test_out_of_domain_answer_is_rejected(self):
        state = transition(initial_state(), SetPhysicalHealth(field="sleep_quality", value="Heavenly"))
        assert state.draft.physical_health.sleep_quality == ""
        assert "sleep_quality" in state.errors

    def test_valid_answer_clears_error(self):
        state = transition(initial_state(), SetPhysicalHealth(field="sleep_quality", value="Heavenly"))
        state = transition(state, SetPhysicalHealth(field="sleep_quality", value="Good"))
        assert state.draft.physical_health.sleep_quality == "Good"
        assert "sleep_quality" not in state.errors

    def test_unknown_tag_is_rejected(self):
        state = transition(initial_state(), ToggleTag(group="symptoms", tag="Hiccups"))
        assert state.draft.symptoms == frozenset()
        assert "symptoms" in state.errors


class TestFieldUpdates:
    """Per-group actions update only their part of the draft."""

    def test_set_answers(self):
        state = initial_state()
        state = transition(state, SetMentalHealth(field="stress_level", value="High"))
        state = transition(state, SetVitals(field="blood_pressure", value="130/85"))
        assert state.draft.mental_health.stress_level == "High"
        assert state.draft.vitals_input.blood_pressure == "130/85"
        assert state.draft.mental_health.anxiety_level == ""

    def test_toggle_adds_then_removes(self):
        state = initial_state()
        state = transition(state, ToggleTag(group="goals", tag="Weight Loss"))
        assert state.draft.goals == frozenset({"Weight Loss"})
        state = transition(state, ToggleTag(group="goals", tag="Weight Loss"))
        assert state.draft.goals == frozenset()

    def test_toggle_twice_restores_original(self):
        state = initial_state()
        state = transition(state, ToggleTag(group="lifestyle_factors", tag="Smoking"))
        before = state.draft
        for _ in range(2):
            state = transition(state, ToggleTag(group="lifestyle_factors", tag="Poor Sleep"))
        assert state.draft == before

    def test_transition_does_not_mutate_input(self):
        state = initial_state()
        transition(state, ToggleTag(group="symptoms", tag="Fatigue"))
        assert state.draft.symptoms == frozenset()


class TestSubmissionStates:
    """Reducer side of submission."""

    def test_next_on_last_step_requests_submission(self):
        state = at_last_step()
        submitting = transition(state, Next())
        assert submitting.status == "submitting"
        assert submitting.step == state.step
        assert submitting.draft == state.draft

    def test_edits_ignored_while_submitting(self):
        state = transition(at_last_step(), Next())
        assert transition(state, ToggleTag(group="symptoms", tag="Fatigue")) == state
        assert transition(state, Next()) == state
        assert transition(state, Reset()) == state

    def test_failure_returns_to_editing(self):
        state = transition(transition(at_last_step(), Next()), SubmissionFailed(error="boom"))
        assert state.status == "editing"
        assert state.step == 4
        assert state.submission_error == "boom"

    def test_submitted_only_accepts_reset(self):
        state = transition(transition(at_last_step(), Next()), SubmissionSucceeded())
        assert state.status == "submitted"
        assert transition(state, Prev()) == state
        fresh = transition(state, Reset())
        assert fresh == initial_state("lead")


class TestIntakeWizard:
    """Controller that runs the submission."""

    def test_full_lead_flow(self):
        submitter = RecordingSubmitter()
        wizard = IntakeWizard(submitter, flow="lead")
        wizard.set_contact("email", "jane@example.com")
        wizard.set_contact("first_name", "Jane")
        wizard.set_contact("last_name", "Doe")
        wizard.next()
        wizard.set_vitals("weight", "70")
        wizard.set_physical_health("energy_level", "Low")
        wizard.next()
        wizard.set_mental_health("anxiety_level", "High")
        wizard.next()
        wizard.toggle("symptoms", "Fatigue")
        wizard.toggle("goals", "Preventive Care")
        assert wizard.step == 4
        assert submitter.calls == []

        wizard.next()
        assert len(submitter.calls) == 1
        submitted = submitter.calls[0]
        assert submitted.symptoms == frozenset({"Fatigue"})
        assert submitted.mental_health.anxiety_level == "High"
        assert wizard.is_submitted
        assert wizard.last_result.success

    def test_next_at_last_step_submits_exactly_once(self):
        submitter = RecordingSubmitter()
        wizard = IntakeWizard(submitter, flow="member")
        for _ in range(3):
            wizard.next()
        wizard.next()
        wizard.next()
        assert len(submitter.calls) == 1

    def test_failed_submission_keeps_draft_for_retry(self):
        submitter = RecordingSubmitter([SubmissionResult(success=False, error="Failed to submit health assessment")])
        wizard = IntakeWizard(submitter, flow="member")
        wizard.toggle("symptoms", "Headaches")
        for _ in range(4):
            wizard.next()
        assert not wizard.is_submitted
        assert wizard.step == 4
        assert wizard.draft.symptoms == frozenset({"Headaches"})
        assert wizard.state.submission_error == "Failed to submit health assessment"

        wizard.next()
        assert len(submitter.calls) == 2
        assert submitter.calls[0] == submitter.calls[1]
        assert wizard.is_submitted
        assert wizard.state.submission_error is None

    def test_prev_at_first_step(self):
        wizard = IntakeWizard(RecordingSubmitter())
        wizard.set_contact("first_name", "Jane")
        before = wizard.state
        wizard.prev()
        assert wizard.state == before

    def test_reset_clears_draft(self):
        wizard = IntakeWizard(RecordingSubmitter(), flow="member")
        wizard.toggle("symptoms", "Fatigue")
        wizard.next()
        wizard.reset()
        assert wizard.step == 1
        assert wizard.draft.symptoms == frozenset()
        assert wizard.last_result is None

    def test_blocked_next_does_not_submit(self):
        submitter = RecordingSubmitter()
        wizard = IntakeWizard(submitter, flow="lead")
        wizard.next()
        assert wizard.step == 1
        assert "email" in wizard.errors
        assert submitter.calls == []

    def test_raising_submitter_leaves_wizard_retryable(self):
        class FlakySubmitter(RecordingSubmitter):
            def submit(self, record):
                self.calls.append(record)
                if len(self.calls) == 1:
                    raise OverflowError("cannot convert float infinity to integer")
                return SubmissionResult(success=True, engagement_score=5, tier=CareTier.ESSENTIAL, recommendation="ok")

        submitter = FlakySubmitter()
        wizard = IntakeWizard(submitter, flow="member")
        for _ in range(4):
            wizard.next()
        assert wizard.state.status == "editing"
        assert wizard.step == 4
        assert wizard.state.submission_error

        wizard.next()
        assert len(submitter.calls) == 2
        assert wizard.is_submitted

    def test_member_wizard_with_infinite_heart_rate_submits(self):
        repo = MagicMock()
        wizard = IntakeWizard(SubmitMemberAssessmentUseCase(repo, "p1"), flow="member")
        wizard.set_vitals("resting_heart_rate", "inf")
        wizard.set_vitals("blood_pressure", "120/80")
        for _ in range(4):
            wizard.next()
        assert wizard.is_submitted
        sample = repo.add_vitals.call_args.args[1]
        assert sample.heart_rate is None
        repo.add_metric.assert_not_called()


class TestMemberFlowContact:
    """The member flow carries no contact details."""

    def test_set_contact_is_ignored(self):
        state = initial_state("member")
        after = transition(state, SetContact(field="email", value="jane@example.com"))
        assert after == state
        assert after.draft.personal_info is None
