"""Dashboard aggregation endpoints."""

from student_intake.api.client import ApiClient, decode
from student_intake.models.dashboard import (
    DashboardFilters,
    DashboardSummary,
    DistrictBreakdown,
    DistrictOption,
    SchoolBreakdown,
    TrendPoint,
)


class DashboardService:
    """Read-only dashboard statistics for signed-in staff.

    A 404 means no data exists for the filters and is raised as
    ``NotFoundError`` so callers can show an empty state.
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def _get(self, path: str, filters: DashboardFilters | None, fallback: str):
        params = (filters or DashboardFilters()).to_params()
        return self.client.request(
            "GET",
            path,
            authenticated=True,
            params=params,
            fallback=fallback,
            not_found="No dashboard data found.",
        )

    def summary(self, filters: DashboardFilters | None = None) -> DashboardSummary:
        fallback = "Failed to fetch dashboard summary."
        response = self._get("/dashboard/summary", filters, fallback)
        return decode(response, DashboardSummary, fallback)

    def district_breakdown(
        self, filters: DashboardFilters | None = None
    ) -> list[DistrictBreakdown]:
        fallback = "Failed to fetch district breakdown."
        response = self._get("/dashboard/district-breakdown", filters, fallback)
        return decode(response, list[DistrictBreakdown], fallback)

    def school_breakdown(
        self, filters: DashboardFilters | None = None
    ) -> list[SchoolBreakdown]:
        fallback = "Failed to fetch school breakdown."
        response = self._get("/dashboard/school-breakdown", filters, fallback)
        return decode(response, list[SchoolBreakdown], fallback)

    def trends(self, filters: DashboardFilters | None = None) -> list[TrendPoint]:
        fallback = "Failed to fetch trend data."
        response = self._get("/dashboard/trends", filters, fallback)
        return decode(response, list[TrendPoint], fallback)

    def districts_schools(self) -> list[DistrictOption]:
        """Districts and schools available as filter values."""
        fallback = "Failed to fetch districts and schools."
        response = self._get("/dashboard/districts-schools", None, fallback)
        return decode(response, list[DistrictOption], fallback)
