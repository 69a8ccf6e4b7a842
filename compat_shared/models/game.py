"""Data models for the canonical compatibility document (compatibility.json)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_REPORT_KEYS = (
    "device",
    "platform",
    "osVersion",
    "arch",
    "gpuBackend",
    "status",
    "perf",
    "date",
    "notes",
    "submittedBy",
    "source",
)

_LAST_REPORT_KEYS = ("device", "platform", "osVersion", "arch", "gpuBackend")

_SETTINGS_KEYS = ("resolution", "framerate")

_GAME_KEYS = (
    "slug",
    "title",
    "titleId",
    "status",
    "perf",
    "tags",
    "platforms",
    "lastReport",
    "updatedAt",
    "notes",
    "recommendedSettings",
    "reports",
    "screenshots",
)


def _extra(data: dict[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


@dataclass(frozen=True)
class GameReport:
    """One history entry. Never modified after it is merged."""

    device: str
    platform: str
    os_version: str
    arch: str
    gpu_backend: str
    status: str
    date: str
    notes: str
    perf: str | None = None  # absent on reports written before perf was tracked per report
    submitted_by: str | None = None
    source: str | None = None  # 'app' | 'discord' | 'github'
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameReport:
        return cls(
            device=data.get("device", ""),
            platform=data.get("platform", ""),
            os_version=data.get("osVersion", ""),
            arch=data.get("arch", ""),
            gpu_backend=data.get("gpuBackend", ""),
            status=data.get("status", ""),
            date=data.get("date", ""),
            notes=data.get("notes", ""),
            perf=data.get("perf"),
            submitted_by=data.get("submittedBy"),
            source=data.get("source"),
            extra=_extra(data, _REPORT_KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "device": self.device,
            "platform": self.platform,
            "osVersion": self.os_version,
            "arch": self.arch,
            "gpuBackend": self.gpu_backend,
            "status": self.status,
        }
        if self.perf is not None:
            data["perf"] = self.perf
        data["date"] = self.date
        data["notes"] = self.notes
        if self.submitted_by is not None:
            data["submittedBy"] = self.submitted_by
        if self.source is not None:
            data["source"] = self.source
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class LastReport:
    """Device snapshot of the most recent report."""

    device: str
    platform: str
    os_version: str
    arch: str
    gpu_backend: str
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LastReport:
        return cls(
            device=data.get("device", ""),
            platform=data.get("platform", ""),
            os_version=data.get("osVersion", ""),
            arch=data.get("arch", ""),
            gpu_backend=data.get("gpuBackend", ""),
            extra=_extra(data, _LAST_REPORT_KEYS),
        )

    @classmethod
    def from_report(cls, report: GameReport) -> LastReport:
        return cls(
            device=report.device,
            platform=report.platform,
            os_version=report.os_version,
            arch=report.arch,
            gpu_backend=report.gpu_backend,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "device": self.device,
            "platform": self.platform,
            "osVersion": self.os_version,
            "arch": self.arch,
            "gpuBackend": self.gpu_backend,
        }
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class RecommendedSettings:
    resolution: str = "720p"
    framerate: str = "30fps"
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecommendedSettings:
        return cls(
            resolution=data.get("resolution", "720p"),
            framerate=data.get("framerate", "30fps"),
            extra=_extra(data, _SETTINGS_KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"resolution": self.resolution, "framerate": self.framerate}
        data.update(self.extra)
        return data


@dataclass
class Game:
    """Aggregate compatibility record of one title."""

    slug: str
    title: str
    title_id: str
    status: str
    perf: str
    last_report: LastReport
    updated_at: str
    notes: str
    tags: list[str] = field(default_factory=list)
    platforms: list[str] = field(default_factory=list)
    recommended_settings: RecommendedSettings = field(default_factory=RecommendedSettings)
    reports: list[GameReport] = field(default_factory=list)
    screenshots: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Game:
        return cls(
            slug=data.get("slug", ""),
            title=data.get("title", ""),
            title_id=data.get("titleId", ""),
            status=data.get("status", ""),
            perf=data.get("perf", ""),
            last_report=LastReport.from_dict(data.get("lastReport") or {}),
            updated_at=data.get("updatedAt", ""),
            notes=data.get("notes", ""),
            tags=list(data.get("tags") or []),
            platforms=list(data.get("platforms") or []),
            recommended_settings=RecommendedSettings.from_dict(
                data.get("recommendedSettings") or {}
            ),
            reports=[GameReport.from_dict(r) for r in data.get("reports") or []],
            screenshots=list(data.get("screenshots") or []),
            extra=_extra(data, _GAME_KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "slug": self.slug,
            "title": self.title,
            "titleId": self.title_id,
            "status": self.status,
            "perf": self.perf,
            "tags": list(self.tags),
            "platforms": list(self.platforms),
            "lastReport": self.last_report.to_dict(),
            "updatedAt": self.updated_at,
            "notes": self.notes,
            "recommendedSettings": self.recommended_settings.to_dict(),
            "reports": [r.to_dict() for r in self.reports],
            "screenshots": list(self.screenshots),
        }
        data.update(self.extra)
        return data


def games_from_json(raw: list[dict[str, Any]]) -> list[Game]:
    return [Game.from_dict(item) for item in raw]


def games_to_json(games: list[Game]) -> list[dict[str, Any]]:
    return [game.to_dict() for game in games]
