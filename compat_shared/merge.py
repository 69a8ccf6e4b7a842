"""Fold a validated report into the game list.

``merge_report`` is pure: it never mutates its inputs and its output depends
only on the game list and the report (the report date is fixed upstream).
"""

from __future__ import annotations

import re
from dataclasses import replace

from compat_shared.models.game import Game, LastReport, RecommendedSettings
from compat_shared.models.report import ReportPayload

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """'Halo 3: ODST' -> 'halo-3-odst'"""
    return _NON_ALNUM_RE.sub("-", title.lower()).strip("-")


def find_game_index(games: list[Game], title_id: str) -> int:
    """Index of the game with ``title_id`` (case-insensitive), or -1."""
    wanted = title_id.upper()
    for i, game in enumerate(games):
        if game.title_id.upper() == wanted:
            return i
    return -1


def _union(existing: list[str], new: list[str] | tuple[str, ...]) -> list[str]:
    merged = list(existing)
    for item in new:
        if item not in merged:
            merged.append(item)
    return merged


def _update_existing(game: Game, report: ReportPayload) -> Game:
    entry = report.to_game_report()
    settings = game.recommended_settings
    if report.resolution or report.framerate:
        settings = replace(
            settings,
            resolution=report.resolution or settings.resolution,
            framerate=report.framerate or settings.framerate,
            extra=dict(settings.extra),
        )
    return replace(
        game,
        status=report.status,
        perf=report.perf,
        last_report=replace(LastReport.from_report(entry), extra=dict(game.last_report.extra)),
        updated_at=report.date,
        notes=report.notes,
        tags=_union(game.tags, report.tags),
        platforms=_union(game.platforms, [report.platform]),
        recommended_settings=settings,
        reports=[entry, *game.reports],
        screenshots=_union(game.screenshots, [report.screenshot] if report.screenshot else []),
        extra=dict(game.extra),
    )


def _new_game(report: ReportPayload) -> Game:
    entry = report.to_game_report()
    return Game(
        slug=slugify(report.title),
        title=report.title,
        title_id=report.title_id,
        status=report.status,
        perf=report.perf,
        last_report=LastReport.from_report(entry),
        updated_at=report.date,
        notes=report.notes,
        tags=list(report.tags),
        platforms=[report.platform],
        recommended_settings=RecommendedSettings(
            resolution=report.resolution or "720p",
            framerate=report.framerate or "30fps",
        ),
        reports=[entry],
        screenshots=[report.screenshot] if report.screenshot else [],
    )


def merge_report(games: list[Game], report: ReportPayload) -> list[Game]:
    """Return a new game list with ``report`` applied.

    Existing games get the report prepended to their history and their
    "most recent" fields overwritten; unknown titles are appended as new games.
    """
    idx = find_game_index(games, report.title_id)
    updated = list(games)
    if idx >= 0:
        updated[idx] = _update_existing(games[idx], report)
    else:
        updated.append(_new_game(report))
    return updated
