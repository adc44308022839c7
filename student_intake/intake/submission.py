"""Submission and status-lookup state machines.

``SubmissionTracker`` guards against double submission of a form and
remembers how the last attempt ended. ``StatusChecker`` turns a status
lookup into an outcome the caller can render without handling exceptions.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from student_intake.errors import ApiError, NotFoundError
from student_intake.intake.validation import (
    FormSchema,
    SAFETY_WARNING,
    IntakeValidationError,
    parse_intake,
)
from student_intake.models.intake import (
    IntakeDraft,
    IntakeForm,
    IntakeStatusRecord,
    IntakeSubmissionResponse,
)

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Please correct the highlighted fields and try again."
NOT_FOUND_MESSAGE = "Intake form not found."


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class StatusState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class SubmissionInProgressError(Exception):
    """A submission is already being sent for this form."""


class IntakeSubmitter(Protocol):
    def submit(
        self, form: IntakeForm, captcha_token: str | None = None
    ) -> IntakeSubmissionResponse: ...


class StatusLookup(Protocol):
    def check_status(self, student_uuid: str) -> IntakeStatusRecord: ...


@dataclass
class SubmissionResult:
    """How a submission attempt ended."""

    state: SubmissionState
    student_uuid: str | None = None
    message: str | None = None
    errors: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED


class SubmissionTracker:
    """Sends one intake form at a time.

    States move ``IDLE -> SUBMITTING -> SUCCEEDED | FAILED``. A failed
    attempt can be retried directly; a succeeded one is cleared by
    ``reset()`` or by the next submit.

    Args:
        service: Object with a ``submit(form, captcha_token)`` method.
        schema: Optional validation schema override.
    """

    def __init__(self, service: IntakeSubmitter, schema: FormSchema | None = None):
        self.service = service
        self.schema = schema
        self.state = SubmissionState.IDLE
        self.last_result: SubmissionResult | None = None
        self._sending = threading.Lock()

    @property
    def student_uuid(self) -> str | None:
        return self.last_result.student_uuid if self.last_result else None

    def reset(self) -> None:
        """Return to IDLE, forgetting the previous outcome.

        Raises:
            SubmissionInProgressError: If a submission is being sent.
        """
        if not self._sending.acquire(blocking=False):
            raise SubmissionInProgressError("Cannot reset while submitting")
        try:
            self.state = SubmissionState.IDLE
            self.last_result = None
        finally:
            self._sending.release()

    def submit(
        self, draft: IntakeDraft, captcha_token: str | None = None
    ) -> SubmissionResult:
        """Validate and send a draft.

        Validation failures and API errors are reported in the returned
        result rather than raised.

        Raises:
            SubmissionInProgressError: If another submission is in flight.
        """
        if not self._sending.acquire(blocking=False):
            raise SubmissionInProgressError("Submission already in progress")

        try:
            self.state = SubmissionState.SUBMITTING
            result = self._send(draft, captcha_token)
            self.state = result.state
            self.last_result = result
            return result
        finally:
            self._sending.release()

    def _send(
        self, draft: IntakeDraft, captcha_token: str | None
    ) -> SubmissionResult:
        try:
            form = parse_intake(draft, self.schema)
        except IntakeValidationError as e:
            logger.info("Submission blocked by %d validation error(s)", len(e.errors))
            return SubmissionResult(
                state=SubmissionState.FAILED,
                message=VALIDATION_FAILED_MESSAGE,
                errors=e.errors,
                warnings=e.result.warnings,
            )

        warnings = [SAFETY_WARNING] if form.has_safety_concern else []
        try:
            response = self.service.submit(form, captcha_token=captcha_token)
        except ApiError as e:
            logger.warning("Intake submission failed: %s", e.message)
            return SubmissionResult(
                state=SubmissionState.FAILED, message=e.message, warnings=warnings
            )

        return SubmissionResult(
            state=SubmissionState.SUCCEEDED,
            student_uuid=response.student_uuid,
            message=response.message or None,
            warnings=warnings,
        )


@dataclass
class StatusOutcome:
    """Result of a status lookup."""

    state: StatusState
    record: IntakeStatusRecord | None = None
    message: str | None = None


class StatusChecker:
    """Looks up the public status of a submission by its UUID."""

    def __init__(self, service: StatusLookup) -> None:
        self.service = service
        self.state = StatusState.IDLE
        self.last_outcome: StatusOutcome | None = None

    def check(self, student_uuid: str) -> StatusOutcome:
        student_uuid = student_uuid.strip()
        if not student_uuid:
            outcome = StatusOutcome(
                state=StatusState.ERROR, message="Please enter a student UUID."
            )
            self.state = outcome.state
            self.last_outcome = outcome
            return outcome

        self.state = StatusState.CHECKING
        try:
            record = self.service.check_status(student_uuid)
            outcome = StatusOutcome(state=StatusState.FOUND, record=record)
        except NotFoundError:
            outcome = StatusOutcome(
                state=StatusState.NOT_FOUND, message=NOT_FOUND_MESSAGE
            )
        except ApiError as e:
            logger.warning("Status check failed: %s", e.message)
            outcome = StatusOutcome(state=StatusState.ERROR, message=e.message)

        self.state = outcome.state
        self.last_outcome = outcome
        return outcome
