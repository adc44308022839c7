"""Enumerations for the student intake workflow."""

from enum import Enum


class ServiceRequestType(str, Enum):
    """When the family wants services to begin."""

    START_NOW = "start_now"
    OPT_IN_FUTURE = "opt_in_future"


class YesNo(str, Enum):
    """Yes/no answer. The backend expects the literal strings, not booleans."""

    YES = "yes"
    NO = "no"


class SeverityOfConcern(str, Enum):
    """Severity of the concern reported by the parent or guardian."""

    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class SexAtBirth(str, Enum):
    """Sex assigned at birth (demographics block)."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_ANSWER = "prefer_not_to_answer"


class IntakeStatus(str, Enum):
    """Processing status of a submitted intake form."""

    PENDING = "pending"
    PROCESSED = "processed"
    ACTIVE = "active"
    SUBMITTED = "submitted"


class UserRole(str, Enum):
    """Role of an authenticated staff user."""

    VPM_ADMIN = "vpm_admin"
    DISTRICT_ADMIN = "district_admin"
    DISTRICT_VIEWER = "district_viewer"
    PUBLIC = "public"


# Multi-select options that unlock a free-text "other" field
OTHER_SERVICE_CATEGORY = "Other Service"
OTHER_RACE = "Other (please specify)"
