import logging

import streamlit as st

from vitale.application.report import render_assessment_report, report_filename
from vitale.application.use_cases import (
    LoadHealthDashboardUseCase,
    SubmitLeadAssessmentUseCase,
    SubmitMemberAssessmentUseCase,
)
from vitale.application.wizard import IntakeWizard
from vitale.domain.models import Alert
from vitale.domain.vocabulary import ANSWER_DOMAINS, TAG_VOCABULARIES
from vitale.infrastructure.config import Settings
from vitale.infrastructure.storage.json_store import JsonHealthStore
from vitale.infrastructure.storage.supabase_store import SupabaseHealthStore


logger = logging.getLogger(__name__)


SEVERITY_ICONS = {"high": "🔴", "medium": "🟡", "low": "🟢"}

FIELD_LABELS = {
    "email": "Email",
    "first_name": "First Name",
    "last_name": "Last Name",
    "phone": "Phone",
    "weight": "Weight (kg)",
    "height": "Height (cm)",
    "blood_pressure": "Blood Pressure (e.g., 120/80)",
    "resting_heart_rate": "Resting Heart Rate (bpm)",
    "exercise_frequency": "Exercise Frequency",
    "sleep_quality": "Sleep Quality",
    "energy_level": "Energy Level",
    "stress_level": "Stress Level",
    "mood_stability": "Mood Stability",
    "anxiety_level": "Anxiety Level",
    "symptoms": "Current Symptoms",
    "lifestyle_factors": "Lifestyle Factors",
    "goals": "Health Goals",
}


def build_repository(settings: Settings):
    if settings.use_supabase:
        return SupabaseHealthStore(settings=settings)
    return JsonHealthStore(storage_path=settings.store_path)


def format_alert(alert: Alert) -> str:
    icon = SEVERITY_ICONS.get(alert.severity, "⚪")
    when = alert.detected_at.strftime("%Y-%m-%d %H:%M")
    return (
        f"{icon} **{alert.message}** ({alert.severity})\n\n"
        f"{alert.recommendation}\n\n"
        f"_Detected {when}_"
    )


def _render_text_section(wizard: IntakeWizard, section: str, setter) -> None:
    values = getattr(wizard.draft, section)
    for field, current in values.model_dump().items():
        value = st.text_input(FIELD_LABELS[field], value=current, key=f"{section}.{field}")
        if value != current:
            setter(field, value)
        if field in wizard.errors:
            st.error(wizard.errors[field])


def _render_choice_section(wizard: IntakeWizard, section: str, setter) -> None:
    values = getattr(wizard.draft, section)
    for field, current in values.model_dump().items():
        options = [""] + list(ANSWER_DOMAINS[field])
        value = st.selectbox(
            FIELD_LABELS[field],
            options,
            index=options.index(current),
            format_func=lambda o: o or "Select…",
            key=f"{section}.{field}",
        )
        if value != current:
            setter(field, value)


def _render_tag_section(wizard: IntakeWizard, group: str) -> None:
    st.markdown(f"#### {FIELD_LABELS[group]}")
    selected = getattr(wizard.draft, group)
    columns = st.columns(2)
    for i, tag in enumerate(TAG_VOCABULARIES[group]):
        checked = columns[i % 2].checkbox(tag, value=tag in selected, key=f"{group}.{tag}")
        if checked != (tag in selected):
            wizard.toggle(group, tag)


def render_wizard(wizard: IntakeWizard) -> None:
    state = wizard.state
    st.progress(state.step / state.max_step)
    st.markdown(f"### {state.current_step.title}")

    renderers = {
        "personal_info": lambda: _render_text_section(wizard, "personal_info", wizard.set_contact),
        "vitals_input": lambda: _render_text_section(wizard, "vitals_input", wizard.set_vitals),
        "physical_health": lambda: _render_choice_section(wizard, "physical_health", wizard.set_physical_health),
        "mental_health": lambda: _render_choice_section(wizard, "mental_health", wizard.set_mental_health),
        "symptoms": lambda: _render_tag_section(wizard, "symptoms"),
        "lifestyle_factors": lambda: _render_tag_section(wizard, "lifestyle_factors"),
        "goals": lambda: _render_tag_section(wizard, "goals"),
    }
    for section in state.current_step.sections:
        renderers[section]()

    if state.submission_error:
        st.error(f"❌ {state.submission_error}")

    col1, col2 = st.columns([1, 1])
    with col1:
        if state.step > 1 and st.button("Back", use_container_width=True):
            wizard.prev()
            st.rerun()
    with col2:
        label = "Complete Assessment" if state.is_last_step else "Continue"
        if st.button(label, use_container_width=True, disabled=state.status == "submitting"):
            wizard.next()
            st.rerun()


def _clear_widget_state() -> None:
    # Wizard widgets are keyed "<section>.<field>"; drop them so a fresh draft renders blank.
    sections = {"personal_info", "vitals_input", "physical_health", "mental_health", *TAG_VOCABULARIES}
    for key in [k for k in st.session_state if str(k).split(".", 1)[0] in sections]:
        del st.session_state[key]


def _render_result(wizard: IntakeWizard) -> None:
    result = wizard.last_result
    st.success("✅ Your health assessment has been completed!")
    if result is not None:
        st.metric("Engagement score", result.engagement_score)
        st.info(result.recommendation)
    if st.button("Start a new assessment"):
        _clear_widget_state()
        wizard.reset()
        st.rerun()


def lead_capture_page(settings: Settings) -> None:
    st.markdown("# 🧠 AI Health Assessment")
    if "lead_wizard" not in st.session_state:
        usecase = SubmitLeadAssessmentUseCase(build_repository(settings))
        st.session_state.lead_wizard = IntakeWizard(usecase, flow="lead")
    wizard = st.session_state.lead_wizard
    if wizard.is_submitted:
        _render_result(wizard)
    else:
        render_wizard(wizard)


def health_alerts_page(settings: Settings) -> None:
    st.markdown("# 🩺 Health Alerts")
    profile_id = st.sidebar.text_input("Profile ID", value=st.session_state.get("profile_id", ""))
    if not profile_id:
        st.info("Enter your profile ID in the sidebar to load your health data.")
        return
    st.session_state["profile_id"] = profile_id

    repository = build_repository(settings)
    dashboard = LoadHealthDashboardUseCase(repository).load(profile_id)
    if not dashboard.success:
        st.error(f"❌ {dashboard.error}")
    elif dashboard.alerts:
        for alert in dashboard.alerts:
            st.warning(format_alert(alert))
    else:
        st.success("✓ No active health alerts")

    if dashboard.latest_assessment is not None:
        entry = dashboard.latest_assessment
        st.download_button(
            "Download latest assessment",
            data=render_assessment_report(entry),
            file_name=report_filename(entry),
            mime="text/plain",
        )

    st.divider()
    wizard_key = f"member_wizard:{profile_id}"
    if wizard_key not in st.session_state:
        usecase = SubmitMemberAssessmentUseCase(repository, profile_id)
        st.session_state[wizard_key] = IntakeWizard(usecase, flow="member")
    wizard = st.session_state[wizard_key]
    if wizard.is_submitted:
        _render_result(wizard)
    else:
        render_wizard(wizard)


def main():
    settings = Settings()
    logging.basicConfig(level=settings.log_level)

    st.set_page_config(
        page_title="Vitale Health Concierge",
        page_icon="⚕️",
        layout="centered",
        initial_sidebar_state="expanded",
    )

    page = st.sidebar.radio("Go to", ["Health Assessment", "Health Alerts"])
    if page == "Health Assessment":
        lead_capture_page(settings)
    else:
        health_alerts_page(settings)


if __name__ == "__main__":
    main()
