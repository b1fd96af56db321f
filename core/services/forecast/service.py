from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from core.exceptions import NotFoundError, ValidationError
from core.interfaces import CostBreakdownRepository, ForecastRepository, ProjectRepository
from core.models import CostBreakdownSnapshot, ForecastItem, ForecastVersion
from core.services.forecast.models import StagingTotals, VersionChangeSummary, VersionComparison
from core.services.forecast.staging import ForecastChanges, calculate_staging_totals
from core.services.forecast.versions import (
    SnapshotItem,
    calculate_version_changes,
    compare_snapshots,
    effective_cost,
)

logger = logging.getLogger(__name__)


class ForecastService:
    """Forecast version snapshots, version-over-version diffs and staged edit previews."""

    def __init__(
        self,
        *,
        project_repo: ProjectRepository,
        cost_breakdown_repo: CostBreakdownRepository,
        forecast_repo: ForecastRepository,
    ) -> None:
        self._project_repo: ProjectRepository = project_repo
        self._cost_breakdown_repo: CostBreakdownRepository = cost_breakdown_repo
        self._forecast_repo: ForecastRepository = forecast_repo

    def _require_project(self, project_id: str) -> None:
        if self._project_repo.get(project_id) is None:
            raise NotFoundError("Project not found.", code="PROJECT_NOT_FOUND")

    def _baseline_items(self, project_id: str) -> List[ForecastItem]:
        return [
            ForecastItem(
                id=row.id,
                budget_cost=float(row.budget_cost or 0.0),
                cost_line=row.cost_line,
                spend_type=row.spend_type,
                sub_category=row.sub_category,
            )
            for row in self._cost_breakdown_repo.list_by_project(project_id)
        ]

    def list_versions(self, project_id: str) -> List[ForecastVersion]:
        self._require_project(project_id)
        return sorted(self._forecast_repo.list_versions(project_id), key=lambda v: v.version_number)

    def get_latest_version_number(self, project_id: str) -> int:
        versions = self.list_versions(project_id)
        return versions[-1].version_number if versions else 0

    def get_snapshot(self, project_id: str, version_number: int) -> CostBreakdownSnapshot:
        """Items of one version; version 0 falls back to the baseline budget when it was never stored."""
        self._require_project(project_id)
        if version_number < 0:
            raise ValidationError("Version number cannot be negative.", code="FORECAST_VERSION_INVALID")
        version = self._forecast_repo.get_version(project_id, version_number)
        if version is None:
            if version_number == 0:
                return CostBreakdownSnapshot(version_number=0, items=self._baseline_items(project_id))
            raise NotFoundError(
                f"Forecast version {version_number} not found.",
                code="FORECAST_VERSION_NOT_FOUND",
            )
        return CostBreakdownSnapshot(
            version_number=version_number,
            items=list(self._forecast_repo.list_items(version.id)),
        )

    def get_snapshots(self, project_id: str) -> Dict[int, List[ForecastItem]]:
        numbers = {0} | {version.version_number for version in self.list_versions(project_id)}
        return {number: self.get_snapshot(project_id, number).items for number in sorted(numbers)}

    def get_version_changes(self, project_id: str, version_number: int) -> VersionChangeSummary:
        current = self.get_snapshot(project_id, version_number)
        if version_number == 0:
            return VersionChangeSummary()
        try:
            previous = self.get_snapshot(project_id, version_number - 1)
        except NotFoundError:
            logger.warning(
                "Forecast version %s of project %s has no predecessor; diffing against an empty snapshot",
                version_number,
                project_id,
            )
            previous = CostBreakdownSnapshot(version_number=version_number - 1)
        return calculate_version_changes(
            version_number,
            {current.version_number: current.items, previous.version_number: previous.items},
        )

    def compare_versions(
        self,
        project_id: str,
        version_a: int,
        version_b: int,
        *,
        include_unchanged: bool = True,
    ) -> VersionComparison:
        if version_a == version_b:
            raise ValidationError(
                "Select two different versions to compare.",
                code="VERSION_COMPARE_SAME_VERSION",
            )
        snapshot_a = self.get_snapshot(project_id, version_a)
        snapshot_b = self.get_snapshot(project_id, version_b)
        comparison = compare_snapshots(
            project_id=project_id,
            version_a=version_a,
            items_a=snapshot_a.items,
            version_b=version_b,
            items_b=snapshot_b.items,
            include_unchanged=include_unchanged,
        )
        logger.info(
            "Compared forecast v%s -> v%s for project %s: %d added, %d removed, %d changed",
            version_a,
            version_b,
            project_id,
            comparison.added_items,
            comparison.removed_items,
            comparison.changed_items,
        )
        return comparison

    def preview_staged_forecast(
        self,
        project_id: str,
        changes: Optional[ForecastChanges],
        new_entries: Sequence[SnapshotItem] = (),
    ) -> StagingTotals:
        """
        Totals for a draft forecast on top of the latest version without persisting anything.

        Each item of the latest version contributes its effective cost as the
        budget the edit overlay starts from.
        """
        latest = self.get_snapshot(project_id, self.get_latest_version_number(project_id))
        costs = [{"id": item.id, "budget_cost": effective_cost(item)} for item in latest.items]
        return calculate_staging_totals(costs, changes, list(new_entries))


__all__ = ["ForecastService"]
