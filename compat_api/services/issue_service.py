"""Per-game GitHub issue threads.

Each title has one open issue, titled ``"<TITLEID> — <title>"`` and labelled
``compat-report``. The issue is re-discovered on every report by listing open
``compat-report`` issues; no issue number is stored anywhere.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from compat_api.services.github_api import GitHubAPIClient
from compat_shared.models.report import ReportPayload
from compat_shared.schema import label, status_badge

logger = logging.getLogger(__name__)

CATEGORY_LABEL = "compat-report"

# Labels owned by the latest report; replaced on every update
_REPLACED_PREFIXES = ("state:", "perf:")

SOURCE_FOOTERS = {
    "app": "*Submitted via XeniOS in-app reporter*",
    "discord": "*Submitted via Discord /report*",
    "github": "*Submitted via GitHub issue*",
}


@dataclass(frozen=True)
class IssueRef:
    number: int
    labels: list[str]


def build_issue_title(report: ReportPayload) -> str:
    return f"{report.title_id} — {report.title}"


def build_labels(report: ReportPayload) -> list[str]:
    return [
        CATEGORY_LABEL,
        f"state:{report.status}",
        f"perf:{report.perf}",
        f"platform:{report.platform}",
        f"gpu:{report.gpu_backend}",
    ]


def compute_labels(existing: list[str], report: ReportPayload) -> list[str]:
    """Label set after ``report``: state/perf replaced, everything else kept.

    Foreign labels keep their order and come first, followed by the report's
    own labels in ``build_labels`` order, so re-applying is a no-op.
    """
    owned = build_labels(report)
    kept = [
        name
        for name in existing
        if not name.startswith(_REPLACED_PREFIXES) and name not in owned
    ]
    return [*dict.fromkeys(kept), *owned]


def build_report_body(report: ReportPayload) -> str:
    """Markdown body used for both the opening post and follow-up comments."""
    lines = [
        "## Compatibility Report",
        "",
        "| Field | Value |",
        "|-------|-------|",
        f"| **Title** | {report.title} |",
        f"| **Title ID** | `{report.title_id}` |",
        f"| **Status** | {status_badge(report.status)} |",
        f"| **Performance** | {label('perfTiers', report.perf)} |",
        f"| **Platform** | {report.platform_label} |",
        f"| **Device** | {report.device} |",
        f"| **OS Version** | {report.platform_label} {report.os_version} |",
        f"| **Architecture** | {report.arch} |",
        f"| **GPU Backend** | {report.gpu_backend.upper()} |",
        "",
        "### Notes",
        report.notes,
    ]
    if report.screenshot:
        lines += ["", "### Screenshot", f"![screenshot]({report.screenshot})"]
    lines += ["", "---"]
    if report.submitted_by:
        lines.append(f"Reported by **{report.submitted_by}**")
    lines.append(SOURCE_FOOTERS.get(report.source or "", "*Submitted via the compatibility API*"))
    return "\n".join(lines)


class IssueService:
    """Create-or-append operations on the per-game issue thread."""

    def __init__(self, github: GitHubAPIClient) -> None:
        self.github = github

    async def find_existing(self, title_id: str) -> IssueRef | None:
        prefix = f"{title_id} "
        for issue in await self.github.list_open_issues(CATEGORY_LABEL):
            if issue.get("title", "").startswith(prefix):
                return IssueRef(
                    number=issue["number"],
                    labels=[lbl["name"] for lbl in issue.get("labels", [])],
                )
        return None

    async def _update_labels(self, issue: IssueRef, report: ReportPayload) -> None:
        try:
            await self.github.set_labels(issue.number, compute_labels(issue.labels, report))
        except Exception as e:
            logger.error(f"Label update failed for issue #{issue.number}: {e}")

    async def create_or_update(self, report: ReportPayload) -> str:
        """Open the thread for a new title or comment on the existing one.

        Returns:
            HTML URL of the issue
        """
        body = build_report_body(report)
        existing = await self.find_existing(report.title_id)

        if existing:
            await asyncio.gather(
                self.github.create_comment(existing.number, body),
                self._update_labels(existing, report),
            )
            logger.info(f"Commented on issue #{existing.number} for {report.title_id}")
            return self.github.issue_html_url(existing.number)

        issue = await self.github.create_issue(
            build_issue_title(report), body, build_labels(report)
        )
        logger.info(f"Opened issue #{issue.get('number')} for {report.title_id}")
        return issue.get("html_url") or self.github.issue_html_url(issue["number"])
