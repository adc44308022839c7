"""Dashboard aggregation and admin queue models."""

from pydantic import BaseModel, Field

from student_intake.models.enums import IntakeStatus


class MetricChange(BaseModel):
    """Period-over-period change indicator for a summary metric."""

    value: str = Field(..., description="Formatted change, e.g. '+12%'")
    is_positive: bool = Field(..., description="Whether the change is favorable")


class DashboardSummary(BaseModel):
    """Headline counts shown at the top of the dashboard."""

    total_opt_ins: int = Field(default=0)
    total_referrals: int = Field(default=0)
    active_students: int = Field(default=0)
    pending_intakes: int = Field(default=0)
    completed_sessions: int = Field(default=0)

    opt_ins_change: MetricChange | None = Field(default=None)
    referrals_change: MetricChange | None = Field(default=None)
    active_students_change: MetricChange | None = Field(default=None)
    sessions_change: MetricChange | None = Field(default=None)


class DashboardFilters(BaseModel):
    """Query filters accepted by every dashboard endpoint."""

    district_id: int | None = Field(default=None)
    school_id: int | None = Field(default=None)
    start_date: str | None = Field(default=None, description="YYYY-MM-DD")
    end_date: str | None = Field(default=None, description="YYYY-MM-DD")
    period: str | None = Field(
        default=None, description="weekly, monthly, quarterly or yearly"
    )
    service_status: list[str] = Field(default_factory=list)
    fiscal_period: str | None = Field(default=None)

    def to_params(self) -> list[tuple[str, str]]:
        """Encode as query parameters.

        Unset values are dropped and list values repeat the key once per item.
        """
        params: list[tuple[str, str]] = []
        for key, value in self.model_dump().items():
            if value is None:
                continue
            if isinstance(value, list):
                params.extend((key, str(item)) for item in value)
            else:
                params.append((key, str(value)))
        return params


class DistrictBreakdown(BaseModel):
    """Per-district totals."""

    district_id: int
    district_name: str
    opt_ins: int = Field(default=0)
    referrals: int = Field(default=0)
    active_students: int = Field(default=0)


class SchoolBreakdown(BaseModel):
    """Per-school totals."""

    school_id: int
    school_name: str
    district_id: int
    opt_ins: int = Field(default=0)
    referrals: int = Field(default=0)
    active_students: int = Field(default=0)


class TrendPoint(BaseModel):
    """One period of the trend chart."""

    date: str
    opt_ins: int = Field(default=0)
    referrals: int = Field(default=0)
    sessions: int = Field(default=0)


class SchoolOption(BaseModel):
    """A school selectable in the dashboard filters."""

    id: int
    name: str


class DistrictOption(BaseModel):
    """A district and its schools, selectable in the dashboard filters."""

    id: int
    name: str
    schools: list[SchoolOption] = Field(default_factory=list)


class IntakeQueueItem(BaseModel):
    """Admin queue entry; carries no PHI."""

    id: int
    student_uuid: str
    district: str | None = Field(default=None)
    school: str | None = Field(default=None)
    submitted_date: str | None = Field(default=None)
    has_insurance: bool = Field(default=False)
    status: IntakeStatus = Field(default=IntakeStatus.PENDING)


class IntakeQueueDetails(IntakeQueueItem):
    """Admin queue entry with decrypted PHI (VPM admins only)."""

    student_information: dict = Field(default_factory=dict)
    parent_guardian_contact: dict = Field(default_factory=dict)
    service_request_type: str | None = Field(default=None)
    insurance_information: dict = Field(default_factory=dict)
    demographics: dict | None = Field(default=None)
    immediate_safety_concern: bool | str | None = Field(default=None)
    authorization_consent: bool = Field(default=False)


class ProcessIntakeRequest(BaseModel):
    """Body for marking an intake as processed."""

    simplepractice_record_id: str = Field(..., min_length=1, max_length=100)
    notes: str | None = Field(default=None, max_length=1000)
