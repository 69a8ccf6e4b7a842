"""Dependency injection utilities for FastAPI"""

import logging

from fastapi import Depends, Header, HTTPException, Request

from compat_api.core.config import Settings, get_settings
from compat_api.services import (
    DiscordAPIClient,
    GitHubAPIClient,
    InteractionService,
    IssueService,
    NotificationService,
    ReportService,
)
from compat_api.services.verifier import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    verify_bearer,
    verify_discord_signature,
)
from compat_shared.cache import SessionCache
from compat_shared.models.interaction import PendingReport
from compat_shared.repositories import CompatibilityRepository

logger = logging.getLogger(__name__)


# ============================================
# Shared clients
# ============================================

_github_api: GitHubAPIClient | None = None
_discord_api: DiscordAPIClient | None = None
_session_cache: SessionCache[PendingReport] | None = None


def get_github_api() -> GitHubAPIClient:
    """Get shared GitHubAPIClient singleton (connection reuse)."""
    global _github_api
    if _github_api is None:
        settings = get_settings()
        _github_api = GitHubAPIClient(
            token=settings.github_token,
            owner=settings.github_owner,
            repo=settings.github_repo,
        )
    return _github_api


async def close_github_api() -> None:
    """Close the shared GitHubAPIClient. Call on app shutdown."""
    global _github_api
    if _github_api is not None:
        await _github_api.close()
        _github_api = None


def get_discord_api() -> DiscordAPIClient:
    """Get shared DiscordAPIClient singleton (connection reuse)."""
    global _discord_api
    if _discord_api is None:
        settings = get_settings()
        _discord_api = DiscordAPIClient(
            webhook_url=settings.discord_webhook,
            application_id=settings.discord_application_id,
        )
    return _discord_api


async def close_discord_api() -> None:
    """Close the shared DiscordAPIClient. Call on app shutdown."""
    global _discord_api
    if _discord_api is not None:
        await _discord_api.close()
        _discord_api = None


def get_session_cache() -> SessionCache[PendingReport]:
    """Pending /report sessions live for the lifetime of the process."""
    global _session_cache
    if _session_cache is None:
        settings = get_settings()
        _session_cache = SessionCache(
            maxsize=settings.session_max_entries,
            ttl=settings.session_ttl_seconds,
        )
    return _session_cache


# ============================================
# Service Dependencies
# ============================================


def get_compat_repository(
    settings: Settings = Depends(get_settings),
    github: GitHubAPIClient = Depends(get_github_api),
) -> CompatibilityRepository:
    return CompatibilityRepository(github, path=settings.compat_path, branch=settings.branch)


def get_report_service(
    settings: Settings = Depends(get_settings),
    repository: CompatibilityRepository = Depends(get_compat_repository),
    github: GitHubAPIClient = Depends(get_github_api),
    discord_api: DiscordAPIClient = Depends(get_discord_api),
) -> ReportService:
    return ReportService(
        repository=repository,
        issues=IssueService(github),
        notifications=NotificationService(
            discord_api,
            site_url=settings.site_url,
            board_message_id=settings.discord_board_message_id,
        ),
    )


def get_interaction_service(
    settings: Settings = Depends(get_settings),
    sessions: SessionCache[PendingReport] = Depends(get_session_cache),
    repository: CompatibilityRepository = Depends(get_compat_repository),
    report_service: ReportService = Depends(get_report_service),
    discord_api: DiscordAPIClient = Depends(get_discord_api),
) -> InteractionService:
    return InteractionService(
        settings=settings,
        sessions=sessions,
        repository=repository,
        report_service=report_service,
        discord_api=discord_api,
    )


# ============================================
# Authentication Dependencies
# ============================================


async def require_api_key(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Bearer-token check for app / workflow endpoints"""
    if not verify_bearer(authorization, settings.api_key):
        logger.warning("Rejected request with missing or invalid API key")
        raise HTTPException(status_code=401, detail="Unauthorized")


async def require_discord_signature(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> bytes:
    """Verify the Ed25519 signature and return the raw body it covers"""
    body = await request.body()
    valid = verify_discord_signature(
        settings.discord_public_key,
        request.headers.get(SIGNATURE_HEADER),
        request.headers.get(TIMESTAMP_HEADER),
        body,
    )
    if not valid:
        raise HTTPException(status_code=401, detail="Invalid signature")
    return body
