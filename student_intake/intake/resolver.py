"""Conditional section resolution for the intake form.

Decides which fields are currently active given what has been answered so
far. Inactive fields are hidden from the user, their validation errors are
suppressed, and they are left off the wire.
"""

from student_intake.models.enums import OTHER_RACE, OTHER_SERVICE_CATEGORY, YesNo
from student_intake.models.intake import IntakeDraft

STUDENT_FIELDS = (
    "student_information.first_name",
    "student_information.last_name",
    "student_information.grade",
    "student_information.school",
    "student_information.date_of_birth",
    "student_information.student_id",
)

CONTACT_FIELDS = (
    "parent_guardian_contact.name",
    "parent_guardian_contact.email",
    "parent_guardian_contact.phone",
)

# Only shown (and required) when has_insurance == "yes"
INSURANCE_DETAIL_FIELDS = (
    "insurance_information.insurance_company",
    "insurance_information.policyholder_name",
    "insurance_information.relationship_to_student",
    "insurance_information.member_id",
    "insurance_information.group_number",
    "insurance_information.insurance_card_front",
    "insurance_information.insurance_card_back",
)

SERVICE_NEEDS_FIELDS = (
    "service_needs.service_category",
    "service_needs.severity_of_concern",
    "service_needs.type_of_service_needed",
    "service_needs.family_resources",
    "service_needs.referral_concern",
)

DEMOGRAPHICS_FIELDS = (
    "demographics.sex_at_birth",
    "demographics.race",
    "demographics.ethnicity",
)

SERVICE_CATEGORY_OTHER = "service_needs.service_category_other"
RACE_OTHER = "demographics.race_other"

# Fields that are active regardless of any other answer
ALWAYS_ACTIVE_FIELDS = frozenset(
    (
        *STUDENT_FIELDS,
        *CONTACT_FIELDS,
        "service_request_type",
        "insurance_information.has_insurance",
        *SERVICE_NEEDS_FIELDS,
        *DEMOGRAPHICS_FIELDS,
        "immediate_safety_concern",
        "authorization_consent",
    )
)

ALL_FIELD_PATHS = frozenset(
    (
        *ALWAYS_ACTIVE_FIELDS,
        *INSURANCE_DETAIL_FIELDS,
        SERVICE_CATEGORY_OTHER,
        RACE_OTHER,
    )
)


def resolve_active_fields(draft: IntakeDraft) -> frozenset[str]:
    """Return the set of field paths active for the current answers.

    Args:
        draft: Current form state.

    Returns:
        Dotted paths of every visible field.
    """
    active = set(ALWAYS_ACTIVE_FIELDS)

    if draft.insurance_information.has_insurance == YesNo.YES.value:
        active.update(INSURANCE_DETAIL_FIELDS)

    if OTHER_SERVICE_CATEGORY in draft.service_needs.service_category:
        active.add(SERVICE_CATEGORY_OTHER)

    if draft.demographics is not None and OTHER_RACE in draft.demographics.race:
        active.add(RACE_OTHER)

    return frozenset(active)


def is_field_active(draft: IntakeDraft, path: str) -> bool:
    """Check whether a single field is currently active."""
    return path in resolve_active_fields(draft)
