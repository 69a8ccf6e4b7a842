"""Discord notification fan-out: per-report announcements and the status board.

Both are projections of the canonical data and strictly best-effort: every
failure is logged and swallowed so it can never undo an accepted report.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import discord

from compat_api.services.discord_api import DiscordAPIClient
from compat_shared.models.game import Game
from compat_shared.models.report import ReportPayload
from compat_shared.schema import (
    STATUS_EMOJI,
    STATUS_ORDER,
    label,
    perf_badge,
    platform_badge,
    status_badge,
)

logger = logging.getLogger(__name__)

DISCORD_MESSAGE_LIMIT = 2000

STATUS_COLORS = {
    "playable": 0x34D399,
    "ingame": 0x60A5FA,
    "intro": 0xFBBF24,
    "loads": 0xFB923C,
    "nothing": 0xF87171,
}

_NO_MENTIONS = {"parse": []}


def build_report_embed(
    report: ReportPayload,
    issue_url: str,
    *,
    timestamp: datetime | None = None,
) -> discord.Embed:
    """Rich embed announcing one report"""
    embed = discord.Embed(
        title=report.title,
        description=report.notes[:4096],
        color=STATUS_COLORS.get(report.status, 0x9CA3AF),
        timestamp=timestamp or datetime.now(UTC),
    )
    embed.add_field(name="Status", value=status_badge(report.status), inline=True)
    embed.add_field(name="Performance", value=perf_badge(report.perf), inline=True)
    embed.add_field(name="Title ID", value=f"`{report.title_id}`", inline=True)
    embed.add_field(name="Platform", value=platform_badge(report.platform), inline=True)
    embed.add_field(name="Device", value=report.device, inline=True)
    embed.add_field(
        name="OS Version", value=f"{report.platform_label} {report.os_version}", inline=True
    )
    embed.add_field(name="Architecture", value=report.arch.upper(), inline=True)
    embed.add_field(name="GPU Backend", value=report.gpu_backend.upper(), inline=True)
    embed.add_field(
        name="GitHub Issue", value=f"[View]({issue_url})" if issue_url else "N/A", inline=True
    )
    if report.screenshot:
        embed.set_image(url=report.screenshot)

    footer = f"XeniOS Compatibility Report • via {report.source_label}"
    if report.submitted_by:
        footer += f" • by {report.submitted_by}"
    embed.set_footer(text=footer)
    return embed


def _game_line(game: Game, site_url: str) -> str:
    device = game.last_report.device or "unknown device"
    return f"- [{game.title}]({site_url}/compatibility/{game.slug}) · {device}"


def build_board(games: list[Game], site_url: str, limit: int = DISCORD_MESSAGE_LIMIT) -> str:
    """Render the status board, grouped by status from most to least compatible.

    Text longer than ``limit`` is cut on a line boundary and ends with a
    trailer pointing at the full list; it is never split across messages.
    """
    groups: dict[str, list[Game]] = {status: [] for status in STATUS_ORDER}
    for game in games:
        groups.setdefault(game.status, []).append(game)

    # (text, is_game_line)
    lines: list[tuple[str, bool]] = [
        (f"**XeniOS Compatibility Board** · {len(games)} games", False)
    ]
    for status, members in groups.items():
        if not members:
            continue
        heading = f"{STATUS_EMOJI.get(status, '')} {label('statuses', status)}".strip()
        lines.append(("", False))
        lines.append((f"**{heading}** ({len(members)})", False))
        for game in sorted(members, key=lambda g: (g.title.casefold(), g.title_id)):
            lines.append((_game_line(game, site_url), True))

    full = "\n".join(text for text, _ in lines)
    if len(full) <= limit:
        return full

    full_list_url = f"{site_url}/compatibility"
    total_games = sum(1 for _, is_game in lines if is_game)

    def trailer(omitted: int) -> str:
        return f"\n…and {omitted} more — see the full list: {full_list_url}"

    budget = limit - len(trailer(total_games))
    kept: list[str] = []
    length = 0
    shown = 0
    for text, is_game in lines:
        added = len(text) + (1 if kept else 0)
        if length + added > budget:
            break
        kept.append(text)
        length += added
        shown += is_game

    return "\n".join(kept) + trailer(total_games - shown)


class NotificationService:
    """Best-effort Discord projections of the compatibility data."""

    def __init__(
        self,
        discord_api: DiscordAPIClient,
        site_url: str,
        board_message_id: str = "",
    ) -> None:
        self.discord_api = discord_api
        self.site_url = site_url
        self.board_message_id = board_message_id

    async def announce(self, report: ReportPayload, issue_url: str) -> bool:
        """Post the per-report embed. Returns False if it could not be posted."""
        if not self.discord_api.is_configured:
            logger.debug("Discord webhook not configured, skipping announcement")
            return False
        try:
            embed = build_report_embed(report, issue_url)
            await self.discord_api.execute_webhook(
                {"embeds": [embed.to_dict()], "allowed_mentions": _NO_MENTIONS}
            )
            return True
        except Exception as e:
            logger.error(f"Discord announcement failed for {report.title_id}: {e}")
            return False

    async def refresh_board(self, games: list[Game]) -> str | None:
        """Rebuild the status board from ``games``.

        Edits the configured board message, or posts a new one when no id is
        configured yet. A freshly posted id is only logged: the operator has
        to set DISCORD_BOARD_MESSAGE_ID, otherwise every refresh would post
        another board.

        Returns:
            The board message id, or None on failure
        """
        if not self.discord_api.is_configured:
            logger.debug("Discord webhook not configured, skipping status board")
            return None

        try:
            payload = {
                "content": build_board(games, self.site_url),
                "flags": discord.MessageFlags(suppress_embeds=True).value,
                "allowed_mentions": _NO_MENTIONS,
            }
            if self.board_message_id:
                await self.discord_api.edit_webhook_message(self.board_message_id, payload)
                logger.info(f"Status board updated ({len(games)} games)")
                return self.board_message_id

            message_id = await self.discord_api.execute_webhook(payload, wait=True)
            logger.warning(
                f"Posted a new status board message {message_id}; "
                f"set DISCORD_BOARD_MESSAGE_ID={message_id} so future updates edit it"
            )
            return message_id
        except Exception as e:
            logger.error(f"Status board update failed: {e}")
            return None
