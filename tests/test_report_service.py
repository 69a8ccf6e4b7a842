"""Tests for the shared report pipeline"""

import pytest

from compat_api.services.report_service import build_commit_message
from compat_shared.repositories import ConcurrencyConflictError, DocumentStoreError


class TestCommitMessage:
    def test_format(self, make_report):
        assert (
            build_commit_message(make_report(source="discord"))
            == "compat: Halo 3 — playable on iPhone 15 Pro (iOS) [via discord]"
        )


class TestProcess:
    async def test_full_pipeline(self, report_service, fake_github, fake_discord, make_report):
        result = await report_service.process(make_report())

        assert result.to_dict() == {
            "success": True,
            "game": "Halo 3",
            "status": "playable",
            "issueUrl": "https://github.com/xenios-jp/xenios.jp/issues/1",
        }
        assert [g["slug"] for g in fake_github.games] == ["halo-3"]
        assert fake_github.commits == ["compat: Halo 3 — playable on iPhone 15 Pro (iOS) [via app]"]
        # announcement, then the freshly posted board
        assert len(fake_discord.posts) == 2
        assert "embeds" in fake_discord.posts[0]
        assert "1 games" in fake_discord.posts[1]["content"]

    async def test_second_report_comments(self, report_service, fake_github, make_report):
        await report_service.process(make_report())
        await report_service.process(make_report(status="ingame", perf="ok"))

        game = fake_github.games[0]
        assert game["status"] == "ingame"
        assert len(game["reports"]) == 2
        assert len(fake_github.issues) == 1
        assert len(fake_github.comments) == 1

    async def test_issue_failure_keeps_report(self, report_service, fake_github, make_report):
        fake_github.fail_issues = True

        result = await report_service.process(make_report())

        assert result.success
        assert result.issue_url == ""
        assert len(fake_github.games) == 1

    async def test_discord_failure_keeps_report(
        self, report_service, fake_github, fake_discord, make_report
    ):
        fake_discord.fail = True

        result = await report_service.process(make_report())

        assert result.success
        assert len(fake_github.commits) == 1

    async def test_conflict_stops_before_projections(
        self, report_service, fake_github, fake_discord, make_report
    ):
        repository = report_service.repository
        original_fetch = repository.fetch

        async def stale_fetch():
            snapshot = await original_fetch()
            # someone else commits between our read and our write
            fake_github.content = fake_github.content.replace("[]", "[ ]")
            fake_github.sha = "moved-on"
            return snapshot

        repository.fetch = stale_fetch

        with pytest.raises(ConcurrencyConflictError):
            await report_service.process(make_report())

        assert fake_github.commits == []
        assert fake_github.issues == []
        assert fake_discord.posts == []

    async def test_read_failure(self, report_service, fake_github, make_report):
        fake_github.fail_reads = True

        with pytest.raises(DocumentStoreError):
            await report_service.process(make_report())


class TestRebuildBoard:
    async def test_rebuild(self, report_service, fake_github, fake_discord, make_report):
        await report_service.process(make_report())
        fake_discord.posts.clear()

        result = await report_service.rebuild_board()

        assert result.games == 1
        assert result.message_id is not None
        assert "Halo 3" in fake_discord.posts[0]["content"]
