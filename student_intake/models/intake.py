"""Intake form data models.

Two families of models live here:

- Draft models (``IntakeDraft`` and its sections) hold a form while it is
  being filled in. Every field is optional so partially completed or
  previously submitted data can always be loaded.
- Validated models (``IntakeForm`` and its sections) can only be built from a
  draft that passed the intake schema. The insurance block is a tagged union
  on ``has_insurance`` so a form claiming insurance always carries the
  company, policyholder and member ID.
"""

import mimetypes
from datetime import date
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator

from student_intake.models.enums import (
    IntakeStatus,
    SeverityOfConcern,
    ServiceRequestType,
    SexAtBirth,
    YesNo,
)


def _coerce_yes_no(v: Any) -> Any:
    """Map booleans and empty strings onto the yes/no wire values."""
    if v is None:
        return None
    if isinstance(v, YesNo):
        return v.value
    if isinstance(v, bool):
        return YesNo.YES.value if v else YesNo.NO.value
    if isinstance(v, str):
        value = v.strip().lower()
        if not value:
            return None
        if value in ("true", "1"):
            return YesNo.YES.value
        if value in ("false", "0"):
            return YesNo.NO.value
        return value
    return v


def _coerce_list(v: Any) -> Any:
    """Accept None or a single string for a multi-select field."""
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v.strip() else []
    return v


class InsuranceCard(BaseModel):
    """Binary image of one side of an insurance card."""

    filename: str = Field(..., description="Original file name")
    content: bytes = Field(..., repr=False, description="Raw image bytes")
    content_type: str = Field(default="image/jpeg", description="MIME type")

    @classmethod
    def from_path(cls, path: Path | str) -> "InsuranceCard":
        """Load a card image from disk.

        Args:
            path: Path to the image file.

        Returns:
            InsuranceCard with the file contents.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


# ---------------------------------------------------------------------------
# Draft models
# ---------------------------------------------------------------------------


class StudentInformationDraft(BaseModel):
    """Student section as entered so far."""

    first_name: str | None = Field(default=None, description="Student first name")
    last_name: str | None = Field(default=None, description="Student last name")
    grade: str | None = Field(default=None, description="Grade level")
    school: str | None = Field(default=None, description="School name")
    date_of_birth: str | None = Field(
        default=None, description="Date of birth (YYYY-MM-DD)"
    )
    student_id: str | None = Field(default=None, description="District student ID")


class ParentGuardianContactDraft(BaseModel):
    """Parent or guardian contact section as entered so far."""

    name: str | None = Field(default=None, description="Parent/guardian name")
    email: str | None = Field(default=None, description="Contact email")
    phone: str | None = Field(default=None, description="Contact phone number")


class InsuranceInformationDraft(BaseModel):
    """Insurance section as entered so far."""

    has_insurance: str | None = Field(default=None, description="'yes' or 'no'")
    insurance_company: str | None = Field(default=None)
    policyholder_name: str | None = Field(default=None)
    relationship_to_student: str | None = Field(default=None)
    member_id: str | None = Field(default=None)
    group_number: str | None = Field(default=None)
    insurance_card_front: InsuranceCard | None = Field(default=None)
    insurance_card_back: InsuranceCard | None = Field(default=None)

    @field_validator("has_insurance", mode="before")
    @classmethod
    def coerce_has_insurance(cls, v: Any) -> Any:
        """Accept booleans for backwards compatibility with older clients."""
        return _coerce_yes_no(v)

    @field_validator("insurance_card_front", "insurance_card_back", mode="before")
    @classmethod
    def drop_card_references(cls, v: Any) -> Any:
        """Card URLs or file names returned by the server are not attachments."""
        if isinstance(v, (InsuranceCard, dict)):
            return v
        return None


class ServiceNeedsDraft(BaseModel):
    """Service needs section as entered so far."""

    service_category: list[str] = Field(default_factory=list)
    service_category_other: str | None = Field(default=None)
    severity_of_concern: str | None = Field(default=None)
    type_of_service_needed: list[str] = Field(default_factory=list)
    family_resources: list[str] = Field(default_factory=list)
    referral_concern: list[str] = Field(default_factory=list)

    @field_validator(
        "service_category",
        "type_of_service_needed",
        "family_resources",
        "referral_concern",
        mode="before",
    )
    @classmethod
    def coerce_lists(cls, v: Any) -> Any:
        return _coerce_list(v)


class DemographicsDraft(BaseModel):
    """Optional demographics section as entered so far."""

    sex_at_birth: str | None = Field(default=None)
    race: list[str] = Field(default_factory=list)
    race_other: str | None = Field(default=None)
    ethnicity: list[str] = Field(default_factory=list)

    @field_validator("race", "ethnicity", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> Any:
        return _coerce_list(v)

    @field_validator("sex_at_birth", mode="before")
    @classmethod
    def blank_sex_at_birth(cls, v: Any) -> Any:
        """An empty answer means the question was skipped."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class IntakeDraft(BaseModel):
    """An intake form in progress.

    Created empty, then populated field by field. Nothing here is enforced;
    the intake schema decides whether the draft can be submitted.
    """

    student_information: StudentInformationDraft = Field(
        default_factory=StudentInformationDraft
    )
    parent_guardian_contact: ParentGuardianContactDraft = Field(
        default_factory=ParentGuardianContactDraft
    )
    service_request_type: str | None = Field(default=None)
    insurance_information: InsuranceInformationDraft = Field(
        default_factory=InsuranceInformationDraft
    )
    service_needs: ServiceNeedsDraft = Field(default_factory=ServiceNeedsDraft)
    demographics: DemographicsDraft | None = Field(default=None)
    immediate_safety_concern: str | None = Field(default=None)
    authorization_consent: bool = Field(default=False)

    @field_validator("immediate_safety_concern", mode="before")
    @classmethod
    def coerce_safety_concern(cls, v: Any) -> Any:
        return _coerce_yes_no(v)

    @field_validator("authorization_consent", mode="before")
    @classmethod
    def coerce_consent(cls, v: Any) -> bool:
        """Accept the "true"/"false" strings used on the wire."""
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip().lower() == "true"
        return bool(v)

    def get_value(self, path: str) -> Any:
        """Return the value at a dotted field path.

        Missing intermediate sections (only ``demographics`` can be missing)
        yield None.
        """
        value: Any = self
        for part in path.split("."):
            if value is None:
                return None
            value = getattr(value, part)
        return value


# ---------------------------------------------------------------------------
# Validated models
# ---------------------------------------------------------------------------


class StudentInformation(BaseModel):
    """Identifying information for the student."""

    first_name: str = Field(..., min_length=1, description="Student first name")
    last_name: str = Field(..., min_length=1, description="Student last name")
    grade: str = Field(..., min_length=1, description="Grade level")
    school: str = Field(..., min_length=1, description="School name")
    date_of_birth: str = Field(..., description="Date of birth (YYYY-MM-DD)")
    student_id: str = Field(..., min_length=1, description="District student ID")

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: str) -> str:
        date.fromisoformat(v)
        return v

    @property
    def full_name(self) -> str:
        """Full name as stored by the backend."""
        return f"{self.first_name} {self.last_name}"


class ParentGuardianContact(BaseModel):
    """Contact details for the parent or guardian."""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = Field(..., min_length=10)


class NoInsurance(BaseModel):
    """The student has no insurance on file."""

    has_insurance: Literal["no"] = "no"


class HasInsurance(BaseModel):
    """Insurance details; company, policyholder and member ID are mandatory."""

    has_insurance: Literal["yes"] = "yes"
    insurance_company: str = Field(..., min_length=1)
    policyholder_name: str = Field(..., min_length=1)
    member_id: str = Field(..., min_length=1)
    relationship_to_student: str | None = Field(default=None)
    group_number: str | None = Field(default=None)
    insurance_card_front: InsuranceCard | None = Field(default=None)
    insurance_card_back: InsuranceCard | None = Field(default=None)


InsuranceInformation = Annotated[
    NoInsurance | HasInsurance, Field(discriminator="has_insurance")
]


class ServiceNeeds(BaseModel):
    """Requested services and the severity of the concern."""

    service_category: list[str] = Field(..., min_length=1)
    service_category_other: str | None = Field(default=None)
    severity_of_concern: SeverityOfConcern
    type_of_service_needed: list[str] = Field(..., min_length=1)
    family_resources: list[str] = Field(default_factory=list)
    referral_concern: list[str] = Field(default_factory=list)


class Demographics(BaseModel):
    """Optional demographic information."""

    sex_at_birth: SexAtBirth | None = Field(default=None)
    race: list[str] = Field(default_factory=list)
    race_other: str | None = Field(default=None)
    ethnicity: list[str] = Field(default_factory=list)


class IntakeForm(BaseModel):
    """A complete intake form that passed validation and can be submitted."""

    student_information: StudentInformation
    parent_guardian_contact: ParentGuardianContact
    service_request_type: ServiceRequestType
    insurance_information: InsuranceInformation
    service_needs: ServiceNeeds
    demographics: Demographics | None = Field(default=None)
    immediate_safety_concern: YesNo
    authorization_consent: bool

    @field_validator("authorization_consent")
    @classmethod
    def require_consent(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must authorize to proceed")
        return v

    @property
    def has_safety_concern(self) -> bool:
        """Whether the parent reported an immediate safety concern."""
        return self.immediate_safety_concern == YesNo.YES


# ---------------------------------------------------------------------------
# Server responses
# ---------------------------------------------------------------------------


class IntakeSubmissionResponse(BaseModel):
    """Response to a successful intake submission."""

    student_uuid: str = Field(..., description="Opaque handle for later lookups")
    message: str = Field(default="", description="Server confirmation message")
    status: IntakeStatus = Field(default=IntakeStatus.PENDING)


class IntakeStatusUpdate(BaseModel):
    """Response to a processing status change."""

    status: IntakeStatus | None = Field(default=None)


class IntakeStatusRecord(BaseModel):
    """Public, PHI-free status of a submitted intake form."""

    student_uuid: str
    status: IntakeStatus
    submitted_date: str | None = Field(default=None)
    processed_date: str | None = Field(default=None)


class InsuranceDetails(InsuranceInformationDraft):
    """Insurance block of the details endpoint, with links to stored cards."""

    insurance_card_front_url: str | None = Field(default=None)
    insurance_card_back_url: str | None = Field(default=None)


class IntakeFormDetails(BaseModel):
    """Complete intake form including PHI, as returned to staff."""

    id: str
    student_uuid: str
    status: IntakeStatus
    submitted_date: str | None = Field(default=None)
    processed_date: str | None = Field(default=None)
    updated_date: str | None = Field(default=None)

    student_information: StudentInformationDraft = Field(
        default_factory=StudentInformationDraft
    )
    parent_guardian_contact: ParentGuardianContactDraft = Field(
        default_factory=ParentGuardianContactDraft
    )
    service_request_type: str | None = Field(default=None)
    insurance_information: InsuranceDetails = Field(default_factory=InsuranceDetails)
    service_needs: ServiceNeedsDraft = Field(default_factory=ServiceNeedsDraft)
    demographics: DemographicsDraft | None = Field(default=None)
    immediate_safety_concern: str | None = Field(default=None)
    authorization_consent: bool = Field(default=False)

    @field_validator("immediate_safety_concern", mode="before")
    @classmethod
    def coerce_safety_concern(cls, v: Any) -> Any:
        return _coerce_yes_no(v)

    def to_draft(self) -> IntakeDraft:
        """Return the form portion as an editable draft."""
        return IntakeDraft.model_validate(
            self.model_dump(
                exclude={
                    "id",
                    "student_uuid",
                    "status",
                    "submitted_date",
                    "processed_date",
                    "updated_date",
                }
            )
        )
