"""Field and step validation for the intake wizard."""
import re
from typing import Dict, Tuple

from vitale.domain.models import AssessmentRecord, PersonalInfo


EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email(email: str) -> Tuple[bool, str]:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not email.strip():
        return False, "Email is required"

    email = email.strip().lower()

    if not re.match(EMAIL_PATTERN, email):
        return False, "Please enter a valid email address"

    if len(email) > 254:  # RFC 5321
        return False, "Email is too long"

    local_part, domain = email.rsplit('@', 1)

    if len(local_part) > 64:  # RFC 5321
        return False, "Email local part is too long"

    if len(domain) > 253:  # RFC 1035
        return False, "Email domain is too long"

    if '..' in email or local_part.startswith('.') or local_part.endswith('.'):
        return False, "Please enter a valid email address"

    return True, ""


def validate_required(value: str, label: str) -> Tuple[bool, str]:
    """Reject a blank value for a field the user must fill in."""
    if not value or not value.strip():
        return False, f"{label} is required"
    return True, ""


def validate_contact(info: PersonalInfo) -> Dict[str, str]:
    """
    Check the contact step. Phone is optional and never rejected.

    Returns:
        Mapping of field name to error message; empty when the step is complete.
    """
    errors: Dict[str, str] = {}
    checks = [
        ("email", validate_email(info.email)),
        ("first_name", validate_required(info.first_name, "First name")),
        ("last_name", validate_required(info.last_name, "Last name")),
    ]
    for field, (ok, message) in checks:
        if not ok:
            errors[field] = message
    return errors


def validate_contact_step(record: AssessmentRecord) -> Dict[str, str]:
    return validate_contact(record.personal_info or PersonalInfo())


def validate_nothing(record: AssessmentRecord) -> Dict[str, str]:
    return {}
