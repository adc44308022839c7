"""Data models for the student intake client."""

from student_intake.models.dashboard import (
    DashboardFilters,
    DashboardSummary,
    DistrictBreakdown,
    DistrictOption,
    IntakeQueueDetails,
    IntakeQueueItem,
    MetricChange,
    ProcessIntakeRequest,
    SchoolBreakdown,
    SchoolOption,
    TrendPoint,
)
from student_intake.models.enums import (
    OTHER_RACE,
    OTHER_SERVICE_CATEGORY,
    IntakeStatus,
    ServiceRequestType,
    SeverityOfConcern,
    SexAtBirth,
    UserRole,
    YesNo,
)
from student_intake.models.intake import (
    Demographics,
    DemographicsDraft,
    HasInsurance,
    InsuranceCard,
    InsuranceDetails,
    InsuranceInformation,
    InsuranceInformationDraft,
    IntakeDraft,
    IntakeForm,
    IntakeFormDetails,
    IntakeStatusRecord,
    IntakeStatusUpdate,
    IntakeSubmissionResponse,
    NoInsurance,
    ParentGuardianContact,
    ParentGuardianContactDraft,
    ServiceNeeds,
    ServiceNeedsDraft,
    StudentInformation,
    StudentInformationDraft,
)
from student_intake.models.user import (
    AuthUser,
    MessageResponse,
    SignupResponse,
    TokenResponse,
    UserProfile,
)

__all__ = [
    # Enums
    "IntakeStatus",
    "ServiceRequestType",
    "SeverityOfConcern",
    "SexAtBirth",
    "UserRole",
    "YesNo",
    "OTHER_RACE",
    "OTHER_SERVICE_CATEGORY",
    # Draft models
    "IntakeDraft",
    "StudentInformationDraft",
    "ParentGuardianContactDraft",
    "InsuranceInformationDraft",
    "ServiceNeedsDraft",
    "DemographicsDraft",
    # Validated models
    "IntakeForm",
    "StudentInformation",
    "ParentGuardianContact",
    "NoInsurance",
    "HasInsurance",
    "InsuranceInformation",
    "InsuranceCard",
    "ServiceNeeds",
    "Demographics",
    # Intake responses
    "IntakeSubmissionResponse",
    "IntakeStatusRecord",
    "IntakeStatusUpdate",
    "IntakeFormDetails",
    "InsuranceDetails",
    # Dashboard and admin
    "DashboardFilters",
    "DashboardSummary",
    "DistrictBreakdown",
    "DistrictOption",
    "MetricChange",
    "SchoolBreakdown",
    "SchoolOption",
    "TrendPoint",
    "IntakeQueueItem",
    "IntakeQueueDetails",
    "ProcessIntakeRequest",
    # Auth
    "AuthUser",
    "MessageResponse",
    "SignupResponse",
    "TokenResponse",
    "UserProfile",
]
