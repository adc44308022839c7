"""Declarative validation schema for intake forms.

The schema is a list of rules registered once at import time. Field rules
check a single value; cross-field rules inspect the whole draft and attach
their message to one field. Validation never raises for bad input: it
returns an ``IntakeValidationResult`` mapping field paths to messages.
Rules for fields the resolver marks inactive are skipped, so hidden fields
never block a submission.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from student_intake.intake.resolver import (
    ALL_FIELD_PATHS,
    RACE_OTHER,
    SERVICE_CATEGORY_OTHER,
    resolve_active_fields,
)
from student_intake.models.enums import (
    OTHER_RACE,
    OTHER_SERVICE_CATEGORY,
    ServiceRequestType,
    SeverityOfConcern,
    SexAtBirth,
    YesNo,
)
from student_intake.models.intake import IntakeDraft, IntakeForm

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MIN_PHONE_LENGTH = 10

INSURANCE_REQUIRED_MESSAGE = (
    "Insurance company, policyholder name, and member ID are required "
    "when insurance is selected"
)
SAFETY_WARNING = (
    "If your child is in immediate danger, please call 911 "
    "or local emergency services."
)


@dataclass(frozen=True)
class FieldRule:
    """Validation rule for a single field."""

    path: str
    check: Callable[[Any], bool]
    message: str

    @property
    def attach_to(self) -> str:
        return self.path

    def passes(self, draft: IntakeDraft) -> bool:
        return self.check(draft.get_value(self.path))


@dataclass(frozen=True)
class CrossFieldRule:
    """Validation rule spanning several fields.

    The message is reported once, on ``attach_to``, no matter how many of
    the inspected fields are wrong.
    """

    name: str
    attach_to: str
    check: Callable[[IntakeDraft], bool]
    message: str

    def passes(self, draft: IntakeDraft) -> bool:
        return self.check(draft)


Rule = FieldRule | CrossFieldRule


class IntakeValidationResult(BaseModel):
    """Outcome of validating an intake draft."""

    is_valid: bool = Field(..., description="Whether the form may be submitted")
    errors: dict[str, str] = Field(
        default_factory=dict, description="Field path to error message"
    )
    warnings: list[str] = Field(
        default_factory=list, description="Non-blocking notices for the user"
    )
    safety_concern: bool = Field(
        default=False, description="Whether an immediate safety concern was reported"
    )


class IntakeValidationError(ValueError):
    """Raised when an invalid draft is converted into an IntakeForm."""

    def __init__(self, result: IntakeValidationResult):
        fields = ", ".join(result.errors) or "unknown"
        super().__init__(f"Intake form is invalid: {fields}")
        self.result = result

    @property
    def errors(self) -> dict[str, str]:
        return self.result.errors


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def is_filled(value: Any) -> bool:
    """A non-blank string."""
    return isinstance(value, str) and bool(value.strip())


def is_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value.strip()))


def is_phone(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) >= MIN_PHONE_LENGTH


def is_iso_date(value: Any) -> bool:
    """A real calendar date in YYYY-MM-DD form."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value.strip()):
        return False
    try:
        date.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def is_non_empty_selection(value: Any) -> bool:
    return isinstance(value, list) and any(is_filled(item) for item in value)


def one_of(enum: type[Enum], optional: bool = False) -> Callable[[Any], bool]:
    """Build a check for membership in an enum's values."""
    allowed = {member.value for member in enum}

    def check(value: Any) -> bool:
        if optional and (value is None or value == ""):
            return True
        return value in allowed

    return check


def is_consent_given(value: Any) -> bool:
    return value is True


def insurance_details_present(draft: IntakeDraft) -> bool:
    """Company, policyholder and member ID are all filled when insured."""
    insurance = draft.insurance_information
    if insurance.has_insurance != YesNo.YES.value:
        return True
    return all(
        is_filled(value)
        for value in (
            insurance.insurance_company,
            insurance.policyholder_name,
            insurance.member_id,
        )
    )


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class FormSchema:
    """An ordered set of validation rules over known field paths.

    Args:
        field_paths: Every path a rule may refer to.
        resolver: Function returning the active paths for a draft.
    """

    def __init__(
        self,
        field_paths: frozenset[str] = ALL_FIELD_PATHS,
        resolver: Callable[[IntakeDraft], frozenset[str]] = resolve_active_fields,
    ) -> None:
        self.field_paths = field_paths
        self.resolver = resolver
        self._rules: list[Rule] = []

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def _check_path(self, path: str) -> None:
        if path not in self.field_paths:
            raise ValueError(f"Unknown intake field path: {path}")

    def add_field_rule(
        self, path: str, check: Callable[[Any], bool], message: str
    ) -> "FormSchema":
        """Register a single-field rule.

        Raises:
            ValueError: If the path is not a known field path.
        """
        self._check_path(path)
        self._rules.append(FieldRule(path=path, check=check, message=message))
        return self

    def add_cross_field_rule(
        self,
        name: str,
        attach_to: str,
        check: Callable[[IntakeDraft], bool],
        message: str,
    ) -> "FormSchema":
        """Register a rule spanning several fields.

        Raises:
            ValueError: If attach_to is unknown or the name is already taken.
        """
        self._check_path(attach_to)
        if any(
            isinstance(rule, CrossFieldRule) and rule.name == name
            for rule in self._rules
        ):
            raise ValueError(f"Duplicate cross-field rule: {name}")
        self._rules.append(
            CrossFieldRule(name=name, attach_to=attach_to, check=check, message=message)
        )
        return self

    def validate(self, draft: IntakeDraft) -> IntakeValidationResult:
        """Validate a draft against every active rule.

        Args:
            draft: Current form state.

        Returns:
            IntakeValidationResult. Only the first failing rule per field is
            reported.
        """
        active = self.resolver(draft)
        errors: dict[str, str] = {}

        for rule in self._rules:
            path = rule.attach_to
            if path not in active or path in errors:
                continue
            if not rule.passes(draft):
                errors[path] = rule.message

        safety_concern = draft.immediate_safety_concern == YesNo.YES.value
        warnings = [SAFETY_WARNING] if safety_concern else []

        if errors:
            logger.debug("Intake validation failed for: %s", ", ".join(errors))

        return IntakeValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            safety_concern=safety_concern,
        )


def build_intake_schema() -> FormSchema:
    """Build the standard intake form schema."""
    schema = FormSchema()

    # Student information
    schema.add_field_rule(
        "student_information.first_name", is_filled, "Student first name is required"
    )
    schema.add_field_rule(
        "student_information.last_name", is_filled, "Student last name is required"
    )
    schema.add_field_rule("student_information.grade", is_filled, "Grade is required")
    schema.add_field_rule(
        "student_information.school", is_filled, "School is required"
    )
    schema.add_field_rule(
        "student_information.date_of_birth", is_filled, "Date of birth is required"
    )
    schema.add_field_rule(
        "student_information.date_of_birth",
        is_iso_date,
        "Date of birth must be in YYYY-MM-DD format",
    )
    schema.add_field_rule(
        "student_information.student_id", is_filled, "Student ID is required"
    )

    # Parent/guardian contact
    schema.add_field_rule(
        "parent_guardian_contact.name", is_filled, "Parent/Guardian name is required"
    )
    schema.add_field_rule(
        "parent_guardian_contact.email", is_email, "Invalid email address"
    )
    schema.add_field_rule(
        "parent_guardian_contact.phone", is_phone, "Phone number is required"
    )

    schema.add_field_rule(
        "service_request_type",
        one_of(ServiceRequestType),
        "Please select a service request type",
    )

    # Insurance
    schema.add_field_rule(
        "insurance_information.has_insurance",
        one_of(YesNo),
        "Please indicate whether the student has insurance",
    )
    schema.add_cross_field_rule(
        "insurance_details",
        "insurance_information.insurance_company",
        insurance_details_present,
        INSURANCE_REQUIRED_MESSAGE,
    )

    # Service needs
    schema.add_field_rule(
        "service_needs.service_category",
        is_non_empty_selection,
        "At least one service category is required",
    )
    schema.add_field_rule(
        SERVICE_CATEGORY_OTHER,
        is_filled,
        f"Please describe the service when '{OTHER_SERVICE_CATEGORY}' is selected",
    )
    schema.add_field_rule(
        "service_needs.severity_of_concern",
        one_of(SeverityOfConcern),
        "Please select the severity of concern",
    )
    schema.add_field_rule(
        "service_needs.type_of_service_needed",
        is_non_empty_selection,
        "At least one type of service needed is required",
    )

    # Demographics are optional, but answers given must be valid
    schema.add_field_rule(
        "demographics.sex_at_birth",
        one_of(SexAtBirth, optional=True),
        "Please select a valid sex at birth option",
    )
    schema.add_field_rule(
        RACE_OTHER,
        is_filled,
        f"Please specify race when '{OTHER_RACE}' is selected",
    )

    schema.add_field_rule(
        "immediate_safety_concern",
        one_of(YesNo),
        "Please indicate whether there is an immediate safety concern",
    )
    schema.add_field_rule(
        "authorization_consent", is_consent_given, "You must authorize to proceed"
    )

    return schema


INTAKE_SCHEMA = build_intake_schema()


def validate_intake(
    draft: IntakeDraft, schema: FormSchema | None = None
) -> IntakeValidationResult:
    """Validate a draft with the standard (or a supplied) schema."""
    return (schema or INTAKE_SCHEMA).validate(draft)


# ---------------------------------------------------------------------------
# Draft -> IntakeForm
# ---------------------------------------------------------------------------


def _clean(value: Any) -> Any:
    """Strip strings, turn blanks into None and drop blank list items."""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, list):
        return [item.strip() for item in value if is_filled(item)]
    if isinstance(value, dict):
        return {key: _clean(item) for key, item in value.items()}
    return value


def _form_data(draft: IntakeDraft, active: frozenset[str]) -> dict[str, Any]:
    """Dump the draft, keeping only values of active fields."""
    data = draft.model_dump()

    # Attachments hold raw bytes and are passed through untouched
    insurance = data["insurance_information"]
    cards = {
        key: insurance.pop(key)
        for key in ("insurance_card_front", "insurance_card_back")
    }
    data = _clean(data)

    if data["insurance_information"]["has_insurance"] == YesNo.YES.value:
        data["insurance_information"].update(cards)
    else:
        data["insurance_information"] = {"has_insurance": YesNo.NO.value}

    if SERVICE_CATEGORY_OTHER not in active:
        data["service_needs"]["service_category_other"] = None

    demographics = data.get("demographics")
    if demographics is not None:
        if RACE_OTHER not in active:
            demographics["race_other"] = None
        if not any(demographics.values()):
            data["demographics"] = None

    return data


def _errors_from_validation_error(exc: ValidationError) -> dict[str, str]:
    """Flatten pydantic errors into field-path messages.

    Union tags ("yes"/"no") appear in error locations and are dropped.
    """
    errors: dict[str, str] = {}
    for error in exc.errors():
        parts = [
            str(part)
            for part in error["loc"]
            if not isinstance(part, int) and part not in ("yes", "no")
        ]
        path = ".".join(parts) or "__root__"
        message = error["msg"].removeprefix("Value error, ")
        errors.setdefault(path, message)
    return errors


def parse_intake(draft: IntakeDraft, schema: FormSchema | None = None) -> IntakeForm:
    """Validate a draft and convert it into a submittable IntakeForm.

    Values of inactive fields (e.g. insurance details after switching
    has_insurance to "no") are discarded.

    Args:
        draft: Current form state.
        schema: Optional schema override.

    Returns:
        The validated IntakeForm.

    Raises:
        IntakeValidationError: If the draft does not pass validation.
    """
    schema = schema or INTAKE_SCHEMA
    result = schema.validate(draft)
    if not result.is_valid:
        raise IntakeValidationError(result)

    try:
        return IntakeForm.model_validate(_form_data(draft, schema.resolver(draft)))
    except ValidationError as e:
        result = IntakeValidationResult(
            is_valid=False,
            errors=_errors_from_validation_error(e),
            warnings=result.warnings,
            safety_concern=result.safety_concern,
        )
        raise IntakeValidationError(result) from e
