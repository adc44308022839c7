"""Intake form logic: field resolution, validation, wire format and submission."""

from student_intake.intake.resolver import is_field_active, resolve_active_fields
from student_intake.intake.submission import (
    StatusChecker,
    StatusOutcome,
    StatusState,
    SubmissionInProgressError,
    SubmissionResult,
    SubmissionState,
    SubmissionTracker,
)
from student_intake.intake.transform import (
    WirePayload,
    deserialize_payload,
    details_to_draft,
    serialize_intake,
)
from student_intake.intake.validation import (
    INTAKE_SCHEMA,
    SAFETY_WARNING,
    FormSchema,
    IntakeValidationError,
    IntakeValidationResult,
    parse_intake,
    validate_intake,
)

__all__ = [
    # Resolution
    "is_field_active",
    "resolve_active_fields",
    # Validation
    "FormSchema",
    "INTAKE_SCHEMA",
    "IntakeValidationError",
    "IntakeValidationResult",
    "SAFETY_WARNING",
    "parse_intake",
    "validate_intake",
    # Wire format
    "WirePayload",
    "deserialize_payload",
    "details_to_draft",
    "serialize_intake",
    # Submission
    "StatusChecker",
    "StatusOutcome",
    "StatusState",
    "SubmissionInProgressError",
    "SubmissionResult",
    "SubmissionState",
    "SubmissionTracker",
]
