"""Tests for the intake validation schema."""

import pytest

from student_intake.intake.validation import (
    INSURANCE_REQUIRED_MESSAGE,
    SAFETY_WARNING,
    FormSchema,
    IntakeValidationError,
    is_filled,
    is_iso_date,
    parse_intake,
    validate_intake,
)
from student_intake.models.enums import OTHER_RACE
from student_intake.models.intake import (
    DemographicsDraft,
    HasInsurance,
    IntakeDraft,
    NoInsurance,
)


class TestChecks:
    """Tests for individual check functions."""

    def test_is_filled(self) -> None:
        """Blank and non-string values are not filled."""
        assert is_filled("Ana")
        assert not is_filled("   ")
        assert not is_filled(None)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2012-04-03", True),
            ("2012-02-30", False),
            ("04/03/2012", False),
            ("2012-4-3", False),
            (None, False),
        ],
    )
    def test_is_iso_date(self, value: object, expected: bool) -> None:
        """Only real YYYY-MM-DD dates pass."""
        assert is_iso_date(value) is expected


class TestValidateIntake:
    """Tests for validate_intake with the standard schema."""

    def test_valid_draft(self, valid_draft: IntakeDraft) -> None:
        """A complete draft has no errors or warnings."""
        result = validate_intake(valid_draft)

        assert result.is_valid
        assert result.errors == {}
        assert result.warnings == []
        assert not result.safety_concern

    def test_empty_draft_reports_required_fields(self) -> None:
        """Every required field is reported once."""
        result = validate_intake(IntakeDraft())

        assert not result.is_valid
        assert result.errors["student_information.first_name"] == (
            "Student first name is required"
        )
        assert result.errors["student_information.date_of_birth"] == (
            "Date of birth is required"
        )
        assert result.errors["authorization_consent"] == "You must authorize to proceed"
        assert "insurance_information.insurance_company" not in result.errors
        assert "demographics.sex_at_birth" not in result.errors

    def test_first_error_per_field_wins(self, valid_draft: IntakeDraft) -> None:
        """A malformed date reports the format message only."""
        valid_draft.student_information.date_of_birth = "04/03/2012"
        result = validate_intake(valid_draft)

        assert result.errors == {
            "student_information.date_of_birth": (
                "Date of birth must be in YYYY-MM-DD format"
            )
        }

    def test_invalid_email(self, valid_draft: IntakeDraft) -> None:
        """An address without a domain is rejected."""
        valid_draft.parent_guardian_contact.email = "maria@"
        result = validate_intake(valid_draft)

        assert result.errors == {
            "parent_guardian_contact.email": "Invalid email address"
        }

    def test_short_phone(self, valid_draft: IntakeDraft) -> None:
        """Phone numbers need at least ten characters."""
        valid_draft.parent_guardian_contact.phone = "555123"
        result = validate_intake(valid_draft)

        assert "parent_guardian_contact.phone" in result.errors

    def test_insurance_details_single_error(self, valid_draft: IntakeDraft) -> None:
        """Missing insurance details produce one error on the company field."""
        valid_draft.insurance_information.has_insurance = "yes"
        result = validate_intake(valid_draft)

        assert result.errors == {
            "insurance_information.insurance_company": INSURANCE_REQUIRED_MESSAGE
        }

    def test_insurance_details_partial(self, insured_draft: IntakeDraft) -> None:
        """A missing member ID is still reported on the company field."""
        insured_draft.insurance_information.member_id = ""
        result = validate_intake(insured_draft)

        assert list(result.errors) == ["insurance_information.insurance_company"]

    def test_other_service_requires_description(self, valid_draft: IntakeDraft) -> None:
        """Choosing "Other Service" makes the description required."""
        valid_draft.service_needs.service_category = ["Other Service"]
        result = validate_intake(valid_draft)

        assert "service_needs.service_category_other" in result.errors

        valid_draft.service_needs.service_category_other = "Art therapy"
        assert validate_intake(valid_draft).is_valid

    def test_invalid_sex_at_birth(self, valid_draft: IntakeDraft) -> None:
        """Demographics are optional but must use known values."""
        valid_draft.demographics = IntakeDraft.model_validate(
            {"demographics": {"sex_at_birth": "unknown"}}
        ).demographics
        result = validate_intake(valid_draft)

        assert result.errors == {
            "demographics.sex_at_birth": "Please select a valid sex at birth option"
        }

    def test_blank_demographics_optional(self, draft_data: dict) -> None:
        """Skipped demographic answers never block submission."""
        draft_data["demographics"] = {"sex_at_birth": "", "race": [], "ethnicity": []}
        draft = IntakeDraft.model_validate(draft_data)

        assert draft.demographics.sex_at_birth is None
        assert validate_intake(draft).is_valid
        assert parse_intake(draft).demographics is None

    def test_blank_sex_at_birth_assigned(self, valid_draft: IntakeDraft) -> None:
        valid_draft.demographics = DemographicsDraft()
        valid_draft.demographics.sex_at_birth = ""

        assert validate_intake(valid_draft).is_valid

    def test_other_race_requires_description(self, valid_draft: IntakeDraft) -> None:
        """Choosing the "Other" race option makes the description required."""
        valid_draft.demographics = DemographicsDraft(race=["Asian", OTHER_RACE])
        result = validate_intake(valid_draft)

        assert result.errors == {
            "demographics.race_other": (
                f"Please specify race when '{OTHER_RACE}' is selected"
            )
        }

        valid_draft.demographics.race_other = "Pacific Islander"
        assert validate_intake(valid_draft).is_valid

    def test_race_other_ignored_without_other_option(
        self, valid_draft: IntakeDraft
    ) -> None:
        """A leftover description is neither checked nor submitted."""
        valid_draft.demographics = DemographicsDraft(race=["Asian"], race_other="")
        result = validate_intake(valid_draft)

        assert "demographics.race_other" not in result.errors
        assert result.is_valid

        valid_draft.demographics.race_other = "stale"
        form = parse_intake(valid_draft)
        assert form.demographics is not None
        assert form.demographics.race_other is None

    def test_safety_concern_warning(self, valid_draft: IntakeDraft) -> None:
        """A safety concern adds a warning but does not block submission."""
        valid_draft.immediate_safety_concern = "yes"
        result = validate_intake(valid_draft)

        assert result.is_valid
        assert result.safety_concern
        assert result.warnings == [SAFETY_WARNING]


class TestFormSchema:
    """Tests for schema registration."""

    def test_unknown_path_rejected(self) -> None:
        """Rules can only target known fields."""
        with pytest.raises(ValueError, match="Unknown intake field path"):
            FormSchema().add_field_rule("student_information.nickname", is_filled, "x")

    def test_duplicate_cross_rule_rejected(self) -> None:
        """Cross-field rule names are unique."""
        schema = FormSchema().add_cross_field_rule(
            "check", "service_request_type", lambda draft: True, "x"
        )
        with pytest.raises(ValueError, match="Duplicate cross-field rule"):
            schema.add_cross_field_rule(
                "check", "service_request_type", lambda draft: True, "y"
            )

    def test_custom_schema(self) -> None:
        """A custom schema only applies its own rules."""
        schema = FormSchema().add_field_rule(
            "student_information.first_name", is_filled, "Name please"
        )
        result = validate_intake(IntakeDraft(), schema)

        assert result.errors == {"student_information.first_name": "Name please"}


class TestParseIntake:
    """Tests for converting drafts into validated forms."""

    def test_parse_valid(self, valid_draft: IntakeDraft) -> None:
        """A valid draft becomes an IntakeForm."""
        form = parse_intake(valid_draft)

        assert form.student_information.full_name == "Ana Ruiz"
        assert isinstance(form.insurance_information, NoInsurance)
        assert form.demographics is None

    def test_parse_invalid_raises(self) -> None:
        """An invalid draft raises with the field errors attached."""
        with pytest.raises(IntakeValidationError) as exc_info:
            parse_intake(IntakeDraft())

        assert "student_information.first_name" in exc_info.value.errors
        assert not exc_info.value.result.is_valid

    def test_details_dropped_when_no(self, insured_draft: IntakeDraft) -> None:
        """Switching to "no" discards previously entered details."""
        insured_draft.insurance_information.has_insurance = "no"
        form = parse_intake(insured_draft)

        assert isinstance(form.insurance_information, NoInsurance)

    def test_insured_form(self, insured_draft: IntakeDraft) -> None:
        """Insurance details are kept when the answer is yes."""
        form = parse_intake(insured_draft)

        assert isinstance(form.insurance_information, HasInsurance)
        assert form.insurance_information.member_id == "M-9"

    def test_values_are_trimmed(self, valid_draft: IntakeDraft) -> None:
        """Surrounding whitespace is removed."""
        valid_draft.student_information.first_name = "  Ana "
        form = parse_intake(valid_draft)

        assert form.student_information.first_name == "Ana"

    def test_inactive_other_text_dropped(self, valid_draft: IntakeDraft) -> None:
        """Leftover "other" text is discarded when its option is not selected."""
        valid_draft.service_needs.service_category_other = "Art therapy"
        form = parse_intake(valid_draft)

        assert form.service_needs.service_category_other is None
