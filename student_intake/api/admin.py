"""Admin intake queue endpoints (VPM admins only)."""

import logging

from student_intake.api.client import ApiClient, decode
from student_intake.models.dashboard import (
    IntakeQueueDetails,
    IntakeQueueItem,
    ProcessIntakeRequest,
)
from student_intake.models.enums import UserRole
from student_intake.session.store import require_role

logger = logging.getLogger(__name__)

ADMIN_ROLES = (UserRole.VPM_ADMIN,)


class AdminService:
    """Review and process submitted intakes.

    Every call checks the local role first, so a non-admin session never
    sends a request that would only be rejected.
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def _require_admin(self) -> None:
        require_role(self.client.session, ADMIN_ROLES)

    def intake_queue(self) -> list[IntakeQueueItem]:
        """List intakes waiting to be processed."""
        self._require_admin()
        fallback = "Failed to fetch intake queue."
        response = self.client.request(
            "GET", "/admin/intake-queue", authenticated=True, fallback=fallback
        )
        return decode(response, list[IntakeQueueItem], fallback)

    def intake_details(self, intake_id: int) -> IntakeQueueDetails:
        """Fetch one queued intake with its PHI."""
        self._require_admin()
        fallback = "Failed to fetch intake details."
        response = self.client.request(
            "GET",
            f"/admin/intake-queue/{intake_id}",
            authenticated=True,
            fallback=fallback,
            not_found="Intake not found.",
        )
        return decode(response, IntakeQueueDetails, fallback)

    def process_intake(self, intake_id: int, request: ProcessIntakeRequest) -> None:
        """Mark an intake as processed in the external records system."""
        self._require_admin()
        self.client.request(
            "POST",
            f"/admin/intake-queue/{intake_id}/process",
            authenticated=True,
            json=request.model_dump(exclude_none=True),
            fallback="Failed to process intake.",
        )
        logger.info("Intake %d marked as processed", intake_id)
