"""Report payload validation and normalization.

Validation is fail-fast: the first violated rule wins and is returned as a
single user-facing message.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from compat_shared.models.report import ReportPayload
from compat_shared.schema import (
    PERF_NOT_APPLICABLE,
    STATUS_NOTHING,
    VALID_ARCHS,
    VALID_GPU_BACKENDS,
    VALID_PERFS,
    VALID_PLATFORMS,
    VALID_STATUSES,
)

# Perf tiers that describe a running game
_RUNNING_PERFS = [p for p in VALID_PERFS if p != PERF_NOT_APPLICABLE]


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    report: ReportPayload | None = None
    error: str | None = None


def _fail(error: str) -> ValidationResult:
    return ValidationResult(ok=False, error=error)


def _required_str(body: dict[str, Any], key: str) -> bool:
    value = body.get(key)
    return isinstance(value, str) and bool(value.strip())


def _optional_str(body: dict[str, Any], key: str) -> str | None:
    value = body.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def today_iso() -> str:
    return datetime.now(UTC).date().isoformat()


def _resolve_perf(status: str, perf: Any) -> tuple[str | None, str | None]:
    """Return (perf, error) after applying the nothing <-> n/a rule.

    Any tier sent alongside status nothing is replaced by n/a.
    """
    if status == STATUS_NOTHING:
        return PERF_NOT_APPLICABLE, None
    if perf == PERF_NOT_APPLICABLE:
        return None, f"perf {PERF_NOT_APPLICABLE} is only valid when status is {STATUS_NOTHING}"
    if perf not in _RUNNING_PERFS:
        return None, f"perf must be one of: {', '.join(VALID_PERFS)}"
    return perf, None


def validate_report(
    body: Any,
    source: str | None = None,
    today: date | None = None,
) -> ValidationResult:
    """Validate a raw report body and return a normalized ``ReportPayload``."""
    if not isinstance(body, dict):
        return _fail("Request body must be a JSON object")

    if not _required_str(body, "titleId"):
        return _fail("titleId is required")
    if not _required_str(body, "title"):
        return _fail("title is required")

    status = body.get("status")
    if status not in VALID_STATUSES:
        return _fail(f"status must be one of: {', '.join(VALID_STATUSES)}")

    perf, perf_error = _resolve_perf(status, body.get("perf"))
    if perf_error:
        return _fail(perf_error)

    if body.get("platform") not in VALID_PLATFORMS:
        return _fail(f"platform must be one of: {', '.join(VALID_PLATFORMS)}")
    if not _required_str(body, "device"):
        return _fail("device is required")
    if not _required_str(body, "osVersion"):
        return _fail("osVersion is required")
    if body.get("arch") not in VALID_ARCHS:
        return _fail(f"arch must be one of: {', '.join(VALID_ARCHS)}")
    if body.get("gpuBackend") not in VALID_GPU_BACKENDS:
        return _fail(f"gpuBackend must be one of: {', '.join(VALID_GPU_BACKENDS)}")
    if not _required_str(body, "notes"):
        return _fail("notes is required")

    # iOS ships a single shader backend
    if body["platform"] == "ios" and body["gpuBackend"] != "msl":
        return _fail("iOS platform only supports MSL GPU backend")

    raw_tags = body.get("tags")
    tags: tuple[str, ...] = ()
    if isinstance(raw_tags, list):
        tags = tuple(t.strip() for t in raw_tags if isinstance(t, str) and t.strip())

    report = ReportPayload(
        title_id=body["titleId"].strip().upper(),
        title=body["title"].strip(),
        status=status,
        perf=perf,  # type: ignore[arg-type]
        platform=body["platform"],
        device=body["device"].strip(),
        os_version=body["osVersion"].strip(),
        arch=body["arch"],
        gpu_backend=body["gpuBackend"],
        notes=body["notes"].strip(),
        date=today.isoformat() if today else today_iso(),
        tags=tags,
        resolution=_optional_str(body, "resolution"),
        framerate=_optional_str(body, "framerate"),
        screenshot=_optional_str(body, "screenshot"),
        submitted_by=_optional_str(body, "submittedBy"),
        source=source,
    )
    return ValidationResult(ok=True, report=report)
