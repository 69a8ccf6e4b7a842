"""Tests for Discord announcements and the status board"""

from datetime import UTC, datetime

import discord

from compat_api.services.notification_service import (
    STATUS_COLORS,
    NotificationService,
    build_board,
    build_report_embed,
)
from compat_shared.merge import merge_report
from compat_shared.models.game import Game


def _games(make_report, specs):
    games = []
    for title_id, title, status in specs:
        games = merge_report(games, make_report(titleId=title_id, title=title, status=status))
    return games


class TestEmbed:
    def test_fields(self, make_report):
        report = make_report(source="discord", submittedBy="tester")
        embed = build_report_embed(
            report, "https://github.com/x/y/issues/1", timestamp=datetime(2026, 10, 19, tzinfo=UTC)
        )
        data = embed.to_dict()
        fields = {f["name"]: f["value"] for f in data["fields"]}

        assert data["title"] == "Halo 3"
        assert data["color"] == STATUS_COLORS["playable"]
        assert fields["Title ID"] == "`4D5307E6`"
        assert fields["OS Version"] == "iOS 17.2"
        assert fields["GPU Backend"] == "MSL"
        assert fields["GitHub Issue"] == "[View](https://github.com/x/y/issues/1)"
        assert data["footer"]["text"].endswith("via Discord /report • by tester")

    def test_missing_issue_and_screenshot(self, make_report):
        embed = build_report_embed(make_report(), "")
        assert {f["name"]: f["value"] for f in embed.to_dict()["fields"]}["GitHub Issue"] == "N/A"
        assert "image" not in embed.to_dict()

        with_shot = build_report_embed(make_report(screenshot="https://cdn.example/s.png"), "")
        assert with_shot.to_dict()["image"]["url"] == "https://cdn.example/s.png"


class TestBoard:
    def test_grouped_by_status_in_order(self, make_report):
        games = _games(
            make_report,
            [
                ("00000003", "Zeta", "nothing"),
                ("00000001", "Beta", "playable"),
                ("00000002", "alpha", "playable"),
                ("00000004", "Gamma", "loads"),
            ],
        )

        board = build_board(games, "https://xenios.jp")
        lines = board.splitlines()

        assert lines[0] == "**XeniOS Compatibility Board** · 4 games"
        playable = board.index("Playable** (2)")
        loads = board.index("Loads** (1)")
        nothing = board.index("Nothing** (1)")
        assert playable < loads < nothing
        assert "In-Game" not in board
        assert board.index("[alpha]") < board.index("[Beta]")
        assert "- [Zeta](https://xenios.jp/compatibility/zeta) · iPhone 15 Pro" in lines

    def test_fits_without_truncation(self, make_report):
        board = build_board(_games(make_report, [("00000001", "A", "playable")]), "https://xenios.jp")

        assert "more" not in board
        assert len(board) <= 2000

    def test_truncated_on_line_boundary(self, make_report):
        specs = [(f"{i:08X}", f"Game number {i:03d}", "playable") for i in range(120)]
        games = _games(make_report, specs)

        board = build_board(games, "https://xenios.jp")

        assert len(board) <= 2000
        body, trailer = board.rsplit("\n", 1)
        assert trailer.startswith("…and ")
        assert trailer.endswith("see the full list: https://xenios.jp/compatibility")
        shown = sum(1 for line in body.splitlines() if line.startswith("- ["))
        omitted = int(trailer.split()[1])
        assert shown + omitted == 120
        assert all(line.endswith("iPhone 15 Pro") for line in body.splitlines() if line.startswith("- ["))

    def test_custom_limit(self, make_report):
        games = _games(make_report, [(f"{i:08X}", f"Game {i}", "ingame") for i in range(10)])

        board = build_board(games, "https://xenios.jp", limit=300)

        assert len(board) <= 300
        assert "more" in board


class TestNotificationService:
    async def test_announce_posts_embed(self, notifications, fake_discord, make_report):
        assert await notifications.announce(make_report(), "https://github.com/x/y/issues/1")

        payload = fake_discord.posts[0]
        assert payload["embeds"][0]["title"] == "Halo 3"
        assert payload["allowed_mentions"] == {"parse": []}

    async def test_announce_swallows_failures(self, notifications, fake_discord, make_report):
        fake_discord.fail = True

        assert await notifications.announce(make_report(), "") is False

    async def test_unconfigured_webhook_is_skipped(self, fake_discord, make_report):
        from compat_api.services import DiscordAPIClient

        service = NotificationService(DiscordAPIClient("", "app"), site_url="https://xenios.jp")

        assert await service.announce(make_report(), "") is False
        assert await service.refresh_board([]) is None

    async def test_board_posted_when_no_message_id(self, notifications, fake_discord, make_report):
        message_id = await notifications.refresh_board(merge_report([], make_report()))

        assert message_id == "901"
        payload = fake_discord.posts[0]
        assert payload["content"].startswith("**XeniOS Compatibility Board** · 1 games")
        assert payload["flags"] == discord.MessageFlags(suppress_embeds=True).value

    async def test_board_edited_when_message_id_set(self, discord_api, fake_discord, make_report):
        service = NotificationService(discord_api, site_url="https://xenios.jp", board_message_id="555")

        assert await service.refresh_board(merge_report([], make_report())) == "555"
        assert fake_discord.posts == []
        assert fake_discord.edits[0][0] == "555"

    async def test_board_failure_returns_none(self, notifications, fake_discord):
        fake_discord.fail = True

        assert await notifications.refresh_board([]) is None

    async def test_board_render_failure_returns_none(self, notifications, fake_discord):
        broken = Game.from_dict({"titleId": "4D5307E6", "title": None, "status": "playable"})

        assert await notifications.refresh_board([broken]) is None
        assert fake_discord.posts == []
