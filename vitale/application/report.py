from datetime import datetime
from typing import Optional

from vitale.application.schemas import MemberAssessmentEntry


def render_assessment_report(entry: MemberAssessmentEntry, generated_at: Optional[datetime] = None) -> str:
    """Plain-text export of a stored assessment, suitable for download."""
    generated_at = generated_at or datetime.now()
    taken = entry.created_at.strftime("%Y-%m-%d") if entry.created_at else "Unknown"
    sections = [
        ("SYMPTOMS", entry.symptoms or "None reported"),
        ("HEALTH HISTORY", entry.history or "None reported"),
        ("HEALTH GOALS", entry.goals or "None specified"),
        ("PHYSICAL HEALTH", entry.physical_health or "No data"),
        ("MENTAL HEALTH", entry.mental_health or "No data"),
    ]
    lines = [
        "VITALE HEALTH CONCIERGE",
        "HEALTH ASSESSMENT REPORT",
        f"Date: {taken}",
        "",
    ]
    for title, body in sections:
        lines.extend([f"{title}:", body, ""])
    lines.append("This report is confidential and intended for personal use only.")
    lines.append(f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}")
    return "\n".join(lines)


def report_filename(entry: MemberAssessmentEntry) -> str:
    day = entry.created_at.strftime("%Y-%m-%d") if entry.created_at else "undated"
    return f"health-assessment-{day}.txt"
