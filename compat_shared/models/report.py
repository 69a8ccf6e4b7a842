"""Normalized report submission, as produced by validation."""

from __future__ import annotations

from dataclasses import dataclass

from compat_shared.models.game import GameReport
from compat_shared.schema import label

SOURCE_LABELS = {
    "app": "XeniOS App",
    "discord": "Discord /report",
    "github": "GitHub Issue",
}


@dataclass(frozen=True)
class ReportPayload:
    """A validated report. ``date`` is fixed when the payload is normalized."""

    title_id: str
    title: str
    status: str
    perf: str
    platform: str
    device: str
    os_version: str
    arch: str
    gpu_backend: str
    notes: str
    date: str
    tags: tuple[str, ...] = ()
    resolution: str | None = None
    framerate: str | None = None
    screenshot: str | None = None
    submitted_by: str | None = None
    source: str | None = None  # 'app' | 'discord' | 'github'

    @property
    def platform_label(self) -> str:
        return label("platforms", self.platform)

    @property
    def source_label(self) -> str:
        return SOURCE_LABELS.get(self.source or "", self.source or "API")

    def to_game_report(self) -> GameReport:
        return GameReport(
            device=self.device,
            platform=self.platform,
            os_version=self.os_version,
            arch=self.arch,
            gpu_backend=self.gpu_backend,
            status=self.status,
            perf=self.perf,
            date=self.date,
            notes=self.notes,
            submitted_by=self.submitted_by,
            source=self.source,
        )
