"""Discord interaction state machine.

    Idle --/report--> AwaitingTextInput --modal--> Processing --> Completed

/report stores its option choices in a pending session keyed by the command's
interaction id and answers with a modal whose custom_id carries that key.
The modal submission pops the session, validates the combined report and
answers with a deferred acknowledgement; the pipeline then runs in the
background and edits the deferred message with the outcome. /lookup and
/support answer immediately and keep no state.

Every slow call (GitHub, webhook posts) happens after the acknowledgement,
so Discord's 3 second response window is never at risk.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import discord

from compat_api.core.config import Settings
from compat_api.services.discord_api import DiscordAPIClient
from compat_api.services.report_service import ReportService
from compat_shared.cache import SessionCache
from compat_shared.models.game import Game
from compat_shared.models.interaction import (
    Command,
    FormSubmit,
    Interaction,
    PendingReport,
    Ping,
)
from compat_shared.models.report import ReportPayload
from compat_shared.repositories import CompatibilityRepository, DocumentStoreError
from compat_shared.schema import SCHEMA, STATUS_ORDER, perf_badge, status_badge
from compat_shared.validation import validate_report

logger = logging.getLogger(__name__)

MODAL_PREFIX = "compat"
LOOKUP_LIMIT = 5
IOS_DEVICE_PREFIXES = ("iphone", "ipad", "ipod")

EPHEMERAL = discord.MessageFlags(ephemeral=True).value

SESSION_EXPIRED_MESSAGE = "⏱️ This report session expired. Please run `/report` again."
INVALID_SUBMISSION_MESSAGE = "❌ Invalid submission. Please use the `/report` command again."

BackgroundJob = Callable[[], Awaitable[None]]


@dataclass
class InteractionReply:
    """Synchronous answer to an interaction, plus optional follow-up work."""

    body: dict[str, Any]
    status_code: int = 200
    background: BackgroundJob | None = None


def message(content: str, *, ephemeral: bool = True) -> dict[str, Any]:
    data: dict[str, Any] = {"content": content, "allowed_mentions": {"parse": []}}
    if ephemeral:
        data["flags"] = EPHEMERAL
    return {"type": discord.InteractionResponseType.channel_message.value, "data": data}


def infer_platform(device: str) -> str:
    """iPhone/iPad/iPod names mean iOS; every other device is a Mac."""
    return "ios" if device.strip().lower().startswith(IOS_DEVICE_PREFIXES) else "macos"


def modal_custom_id(session_key: str) -> str:
    return f"{MODAL_PREFIX}:{session_key}"


def parse_modal_custom_id(custom_id: str) -> str | None:
    prefix, sep, key = custom_id.partition(":")
    if prefix != MODAL_PREFIX or not sep or not key:
        return None
    return key


def _text_input(
    custom_id: str,
    label: str,
    placeholder: str,
    max_length: int,
    style: discord.TextStyle = discord.TextStyle.short,
) -> dict[str, Any]:
    return {
        "type": discord.ComponentType.action_row.value,
        "components": [
            {
                "type": discord.ComponentType.text_input.value,
                "custom_id": custom_id,
                "label": label,
                "style": style.value,
                "placeholder": placeholder,
                "min_length": 1,
                "max_length": max_length,
                "required": True,
            }
        ],
    }


def build_modal(session_key: str) -> dict[str, Any]:
    return {
        "type": discord.InteractionResponseType.modal.value,
        "data": {
            "custom_id": modal_custom_id(session_key),
            "title": "XeniOS Compatibility Report",
            "components": [
                _text_input("title_id", "Title ID", "e.g., 4D5307E6", 16),
                _text_input("game_name", "Game Name", "e.g., Halo 3", 100),
                _text_input(
                    "notes",
                    "Notes",
                    "Describe what works, what doesn't, and any workarounds...",
                    1000,
                    style=discord.TextStyle.paragraph,
                ),
            ],
        },
    }


def _choices(kind: str) -> list[dict[str, str]]:
    return [{"name": opt["label"], "value": opt["value"]} for opt in SCHEMA[kind]]


def build_command_definitions() -> list[dict[str, Any]]:
    """Slash command definitions; option choices come from the schema."""
    string = discord.AppCommandOptionType.string.value
    return [
        {
            "name": "report",
            "description": "Submit a XeniOS compatibility report",
            "options": [
                {
                    "name": "status",
                    "description": "How far does the game get?",
                    "type": string,
                    "required": True,
                    "choices": _choices("statuses"),
                },
                {
                    "name": "perf",
                    "description": "How well does it run?",
                    "type": string,
                    "required": True,
                    "choices": _choices("perfTiers"),
                },
                {
                    "name": "device",
                    "description": "e.g. iPhone 16 Pro, MacBook Pro M3",
                    "type": string,
                    "required": True,
                    "max_length": 100,
                },
                {
                    "name": "os_version",
                    "description": "e.g. 18.3 (iOS) or 15.2 (macOS)",
                    "type": string,
                    "required": True,
                    "max_length": 20,
                },
                {
                    "name": "arch",
                    "description": "CPU architecture",
                    "type": string,
                    "required": True,
                    "choices": _choices("architectures"),
                },
                {
                    "name": "gpu",
                    "description": "GPU backend",
                    "type": string,
                    "required": True,
                    "choices": _choices("gpuBackends"),
                },
                {
                    "name": "screenshot",
                    "description": "Optional screenshot",
                    "type": discord.AppCommandOptionType.attachment.value,
                    "required": False,
                },
            ],
        },
        {
            "name": "lookup",
            "description": "Look up a game's compatibility",
            "options": [
                {
                    "name": "query",
                    "description": "Title or title ID (leave empty for a summary)",
                    "type": string,
                    "required": False,
                }
            ],
        },
        {"name": "support", "description": "Where to get help with XeniOS"},
    ]


def _match_rank(game: Game, query: str) -> int | None:
    """Lower is better; None means no match."""
    title_id = game.title_id.lower()
    title = game.title.lower()
    if title_id == query:
        return 0
    if title_id.startswith(query):
        return 1
    if title.startswith(query):
        return 2
    if query in title or query in title_id:
        return 3
    return None


def search_games(games: list[Game], query: str, limit: int = LOOKUP_LIMIT) -> list[Game]:
    """Best matches of ``query`` against title and title id."""
    needle = query.strip().lower()
    ranked = []
    for game in games:
        rank = _match_rank(game, needle)
        if rank is not None:
            ranked.append((rank, game.title.casefold(), game))
    ranked.sort(key=lambda item: (item[0], item[1]))
    return [game for _, _, game in ranked[:limit]]


def render_game_summary(game: Game, site_url: str) -> str:
    last = game.last_report
    return (
        f"**[{game.title}]({site_url}/compatibility/{game.slug})** (`{game.title_id}`) — "
        f"{status_badge(game.status)} · {perf_badge(game.perf)}\n"
        f"└ {last.device} · {last.os_version} · {len(game.reports)} report(s) · "
        f"updated {game.updated_at}"
    )


def render_overview(games: list[Game], site_url: str) -> str:
    counts = {status: 0 for status in STATUS_ORDER}
    for game in games:
        counts[game.status] = counts.get(game.status, 0) + 1
    lines = [f"**{len(games)} games tracked**"]
    lines += [f"{status_badge(status)}: {count}" for status, count in counts.items()]
    lines.append(f"Full list: <{site_url}/compatibility>")
    return "\n".join(lines)


class InteractionService:
    """Drives /report, /lookup and /support."""

    def __init__(
        self,
        settings: Settings,
        sessions: SessionCache[PendingReport],
        repository: CompatibilityRepository,
        report_service: ReportService,
        discord_api: DiscordAPIClient,
    ) -> None:
        self.settings = settings
        self.sessions = sessions
        self.repository = repository
        self.report_service = report_service
        self.discord_api = discord_api

    async def handle(self, interaction: Interaction) -> InteractionReply:
        if isinstance(interaction, Ping):
            return InteractionReply({"type": discord.InteractionResponseType.pong.value})
        if isinstance(interaction, Command):
            return await self._handle_command(interaction)
        if isinstance(interaction, FormSubmit):
            return self._handle_form(interaction)
        logger.warning(f"Unknown interaction type: {interaction.type}")
        return InteractionReply({"error": "Unknown interaction type"}, status_code=400)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def _handle_command(self, command: Command) -> InteractionReply:
        if command.name == "report":
            return self._start_report(command)
        if command.name == "lookup":
            return InteractionReply(await self._lookup(command.option("query").strip()))
        if command.name == "support":
            return InteractionReply(message(self._support_text()))
        logger.warning(f"Unknown command: /{command.name}")
        return InteractionReply(message(f"❌ Unknown command `/{command.name}`."))

    def _start_report(self, command: Command) -> InteractionReply:
        pending = PendingReport(
            status=command.option("status"),
            perf=command.option("perf"),
            device=command.option("device").strip(),
            os_version=command.option("os_version").strip(),
            arch=command.option("arch"),
            gpu_backend=command.option("gpu"),
            submitted_by=command.user,
            attachment_url=command.attachment_url,
        )
        self.sessions.put(command.id, pending)
        logger.info(f"/report started by {command.user or 'unknown'} ({command.id})")
        return InteractionReply(build_modal(command.id))

    async def _lookup(self, query: str) -> dict[str, Any]:
        try:
            snapshot = await self.repository.fetch()
        except DocumentStoreError as e:
            logger.error(f"/lookup failed to read games: {e}")
            return message("❌ Could not load the compatibility list right now. Try again later.")

        site_url = self.settings.site_url
        if not query:
            return message(render_overview(snapshot.games, site_url))

        matches = search_games(snapshot.games, query)
        if not matches:
            return message(f"No games found for `{query}`.")
        return message("\n\n".join(render_game_summary(g, site_url) for g in matches))

    def _support_text(self) -> str:
        s = self.settings
        return "\n".join(
            [
                "**XeniOS support**",
                f"• Compatibility list: <{s.compatibility_url}>",
                f"• FAQ: <{s.site_url}/faq>",
                f"• Bug reports: <{s.emulator_repo_url}/issues>",
                f"• Discord: <{s.discord_invite_url}>",
                "• Report a game: run `/report` here",
            ]
        )

    # ------------------------------------------------------------------
    # Modal submission
    # ------------------------------------------------------------------

    def _handle_form(self, form: FormSubmit) -> InteractionReply:
        session_key = parse_modal_custom_id(form.custom_id)
        if session_key is None:
            return InteractionReply(message(INVALID_SUBMISSION_MESSAGE))

        pending = self.sessions.pop(session_key)
        if pending is None:
            logger.info(f"Modal submitted for expired session {session_key}")
            return InteractionReply(message(SESSION_EXPIRED_MESSAGE))

        raw = {
            "titleId": form.fields.get("title_id", ""),
            "title": form.fields.get("game_name", ""),
            "notes": form.fields.get("notes", ""),
            "status": pending.status,
            "perf": pending.perf,
            "platform": infer_platform(pending.device),
            "device": pending.device,
            "osVersion": pending.os_version,
            "arch": pending.arch,
            "gpuBackend": pending.gpu_backend,
            "screenshot": pending.attachment_url,
            "submittedBy": pending.submitted_by or form.user,
        }
        result = validate_report(raw, source="discord")
        if not result.ok or result.report is None:
            return InteractionReply(message(f"❌ Validation error: {result.error}"))

        report = result.report

        async def complete() -> None:
            await self._complete_report(form.token, report)

        return InteractionReply(
            {
                "type": discord.InteractionResponseType.deferred_channel_message.value,
                "data": {"flags": EPHEMERAL},
            },
            background=complete,
        )

    async def _complete_report(self, token: str, report: ReportPayload) -> None:
        """Run the pipeline and replace the deferred placeholder with the outcome."""
        try:
            result = await self.report_service.process(report)
            content = f"✅ **{result.game}** — {status_badge(result.status)}"
            if result.issue_url:
                content += f"\n[View on GitHub]({result.issue_url})"
        except Exception as e:
            logger.exception(f"Discord report processing failed for {report.title_id}: {e}")
            content = f"❌ Failed to process report: {e}"

        try:
            await self.discord_api.edit_original_response(
                token, {"content": content, "allowed_mentions": {"parse": []}}
            )
        except Exception as e:
            logger.error(f"Could not deliver /report outcome for {report.title_id}: {e}")
