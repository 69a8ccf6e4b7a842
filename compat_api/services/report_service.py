"""Report pipeline shared by every ingestion channel.

1. Fetch compatibility.json and the sha it was read at
2. Merge the report and commit, conditioned on that sha
3. Create or update the game's GitHub issue (best-effort)
4. Announce on Discord and refresh the status board (best-effort)

Only steps 1-2 can fail the request. Once the commit has landed, the report
is accepted no matter what happens to the projections.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from compat_api.services.issue_service import IssueService
from compat_api.services.notification_service import NotificationService
from compat_shared.merge import merge_report
from compat_shared.models.report import ReportPayload
from compat_shared.repositories import CompatibilityRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of an accepted report."""

    success: bool
    game: str
    status: str
    issue_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "game": self.game,
            "status": self.status,
            "issueUrl": self.issue_url,
        }


@dataclass(frozen=True)
class BoardResult:
    games: int
    message_id: str | None


def build_commit_message(report: ReportPayload) -> str:
    source = report.source or "api"
    return (
        f"compat: {report.title} — {report.status} on {report.device} "
        f"({report.platform_label}) [via {source}]"
    )


class ReportService:
    """Runs a validated report through the store and its projections."""

    def __init__(
        self,
        repository: CompatibilityRepository,
        issues: IssueService,
        notifications: NotificationService,
    ) -> None:
        self.repository = repository
        self.issues = issues
        self.notifications = notifications

    async def process(self, report: ReportPayload) -> PipelineResult:
        """Commit the report, then update issue and Discord projections.

        Raises:
            DocumentStoreError: the canonical document could not be read or
                written (ConcurrencyConflictError when it changed meanwhile)
        """
        snapshot = await self.repository.fetch()
        updated = merge_report(snapshot.games, report)
        await self.repository.commit(updated, snapshot.sha, build_commit_message(report))
        logger.info(f"Report accepted: {report.title_id} {report.status} via {report.source}")

        issue_url = ""
        try:
            issue_url = await self.issues.create_or_update(report)
        except Exception as e:
            logger.error(f"Issue creation/update failed for {report.title_id}: {e}")

        await self.notifications.announce(report, issue_url)
        await self.notifications.refresh_board(updated)

        return PipelineResult(
            success=True,
            game=report.title,
            status=report.status,
            issue_url=issue_url,
        )

    async def rebuild_board(self) -> BoardResult:
        """Rebuild the status board from the current canonical data."""
        snapshot = await self.repository.fetch()
        message_id = await self.notifications.refresh_board(snapshot.games)
        return BoardResult(games=len(snapshot.games), message_id=message_id)
