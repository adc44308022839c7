"""Tests for conditional field resolution."""

from student_intake.intake.resolver import (
    INSURANCE_DETAIL_FIELDS,
    RACE_OTHER,
    SERVICE_CATEGORY_OTHER,
    is_field_active,
    resolve_active_fields,
)
from student_intake.models.intake import IntakeDraft


class TestResolveActiveFields:
    """Tests for resolve_active_fields."""

    def test_empty_draft_hides_conditional_fields(self) -> None:
        """Nothing conditional is active before it is unlocked."""
        active = resolve_active_fields(IntakeDraft())

        assert "student_information.first_name" in active
        assert "insurance_information.has_insurance" in active
        assert not active & set(INSURANCE_DETAIL_FIELDS)
        assert SERVICE_CATEGORY_OTHER not in active
        assert RACE_OTHER not in active

    def test_insurance_yes_unlocks_details(self) -> None:
        """Answering yes shows every insurance detail field."""
        draft = IntakeDraft.model_validate(
            {"insurance_information": {"has_insurance": "yes"}}
        )
        active = resolve_active_fields(draft)

        assert set(INSURANCE_DETAIL_FIELDS) <= active

    def test_insurance_no_keeps_details_hidden(self) -> None:
        """Answering no hides the details even if values were entered."""
        draft = IntakeDraft.model_validate(
            {
                "insurance_information": {
                    "has_insurance": "no",
                    "insurance_company": "Acme",
                }
            }
        )
        assert not is_field_active(draft, "insurance_information.insurance_company")

    def test_other_service_category(self) -> None:
        """Selecting "Other Service" unlocks its description field."""
        draft = IntakeDraft.model_validate(
            {"service_needs": {"service_category": ["Other Service"]}}
        )
        assert is_field_active(draft, SERVICE_CATEGORY_OTHER)

    def test_other_race(self) -> None:
        """Selecting the "other" race option unlocks race_other."""
        draft = IntakeDraft.model_validate(
            {"demographics": {"race": ["Other (please specify)"]}}
        )
        assert is_field_active(draft, RACE_OTHER)
