"""Intake form endpoints: submit, status, details and updates."""

import logging

from student_intake.api.client import ApiClient, decode
from student_intake.intake.transform import serialize_intake
from student_intake.intake.validation import parse_intake
from student_intake.models.enums import IntakeStatus
from student_intake.models.intake import (
    IntakeDraft,
    IntakeForm,
    IntakeFormDetails,
    IntakeStatusRecord,
    IntakeStatusUpdate,
    IntakeSubmissionResponse,
)

logger = logging.getLogger(__name__)

SUBMIT_FALLBACK = "Failed to submit intake form. Please try again."
STATUS_FALLBACK = (
    "Failed to check intake status. Please verify the UUID and try again."
)
NOT_FOUND_MESSAGE = "Intake form not found."
DETAILS_FALLBACK = "Failed to fetch intake form details."
UPDATE_FALLBACK = "Failed to update intake form. Please try again."
STATUS_UPDATE_FALLBACK = "Failed to update status."


class IntakeService:
    """Calls to the ``/intake`` endpoints.

    Submission and status lookup are public and never send the token;
    details and updates require a signed-in staff user.
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def submit(
        self, form: IntakeForm, captcha_token: str | None = None
    ) -> IntakeSubmissionResponse:
        """Submit a validated intake form.

        Raises:
            ApiError: If the request fails.
        """
        payload = serialize_intake(form, captcha_token=captcha_token)
        response = self.client.request(
            "POST",
            "/intake/submit",
            files=payload.to_multipart(),
            fallback=SUBMIT_FALLBACK,
        )
        result = decode(response, IntakeSubmissionResponse, SUBMIT_FALLBACK)
        logger.info("Intake form submitted: %s", result.student_uuid)
        return result

    def check_status(self, student_uuid: str) -> IntakeStatusRecord:
        """Look up the public status of a submission.

        Raises:
            NotFoundError: If no submission has this UUID.
            ApiError: If the request fails.
        """
        response = self.client.request(
            "GET",
            f"/intake/status/{student_uuid.strip()}",
            fallback=STATUS_FALLBACK,
            not_found=NOT_FOUND_MESSAGE,
        )
        return decode(response, IntakeStatusRecord, STATUS_FALLBACK)

    def get_details(self, identifier: str) -> IntakeFormDetails:
        """Fetch the full form, including PHI.

        Raises:
            NotFoundError: If the form does not exist.
            PermissionDeniedError: If the user may not view it.
            ApiError: If the request fails.
        """
        response = self.client.request(
            "GET",
            f"/intake/details/{identifier}",
            authenticated=True,
            fallback=DETAILS_FALLBACK,
            not_found=NOT_FOUND_MESSAGE,
        )
        return decode(response, IntakeFormDetails, DETAILS_FALLBACK)

    def update(self, identifier: str, draft: IntakeDraft) -> IntakeFormDetails:
        """Re-validate an edited form and send it as an update.

        Fields left out of the payload keep their stored values; card images
        are only replaced when new ones are attached.

        Raises:
            IntakeValidationError: If the edited form is invalid.
            ApiError: If the request fails.
        """
        form = parse_intake(draft)
        payload = serialize_intake(form)
        response = self.client.request(
            "PUT",
            f"/intake/update/{identifier}",
            authenticated=True,
            files=payload.to_multipart(),
            fallback=UPDATE_FALLBACK,
        )
        logger.info("Intake form %s updated", identifier)
        return decode(response, IntakeFormDetails, UPDATE_FALLBACK)

    def update_status(self, identifier: str, status: IntakeStatus) -> IntakeStatus:
        """Change the processing status of a form.

        Returns:
            The status now stored by the server.
        """
        response = self.client.request(
            "PUT",
            f"/intake/status/{identifier}",
            authenticated=True,
            json={"status": status.value},
            fallback=STATUS_UPDATE_FALLBACK,
        )
        body = decode(response, IntakeStatusUpdate, STATUS_UPDATE_FALLBACK)
        new_status = body.status or status
        logger.info("Intake form %s status set to %s", identifier, new_status.value)
        return new_status
