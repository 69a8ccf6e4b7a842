"""Services layer - Business logic

This module provides service classes for handling business logic.
Services are initialized with their dependencies and accessed through dependency injection.
"""

from .discord_api import DiscordAPIClient
from .github_api import GitHubAPIClient, GitHubAPIError
from .interaction_service import InteractionReply, InteractionService
from .issue_service import IssueService
from .notification_service import NotificationService
from .report_service import BoardResult, PipelineResult, ReportService

__all__ = [
    "BoardResult",
    "DiscordAPIClient",
    "GitHubAPIClient",
    "GitHubAPIError",
    "InteractionReply",
    "InteractionService",
    "IssueService",
    "NotificationService",
    "PipelineResult",
    "ReportService",
]
