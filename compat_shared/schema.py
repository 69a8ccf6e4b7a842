"""Enumerated field definitions shared by validation, /schema and Discord commands.

When adding new platforms, GPU backends, etc., update these lists.
Everything else derives its valid values and labels from here.
"""

from __future__ import annotations

from typing import TypedDict


class FieldOption(TypedDict):
    value: str
    label: str
    description: str


PERF_NOT_APPLICABLE = "n/a"
STATUS_NOTHING = "nothing"

SCHEMA: dict[str, list[FieldOption]] = {
    "statuses": [
        {
            "value": "playable",
            "label": "Playable",
            "description": "Game can be played start to finish with minor issues",
        },
        {
            "value": "ingame",
            "label": "In-Game",
            "description": "Reaches gameplay but has significant issues",
        },
        {
            "value": "intro",
            "label": "Intro",
            "description": "Gets past loading but crashes before or during gameplay",
        },
        {
            "value": "loads",
            "label": "Loads",
            "description": "Boots and shows menus but can't reach gameplay",
        },
        {
            "value": "nothing",
            "label": "Nothing",
            "description": "Does not boot or crashes immediately",
        },
    ],
    "perfTiers": [
        {"value": "great", "label": "Great", "description": "Runs at or near full speed"},
        {
            "value": "ok",
            "label": "OK",
            "description": "Playable but with noticeable performance drops",
        },
        {"value": "poor", "label": "Poor", "description": "Significant performance issues"},
        {
            "value": PERF_NOT_APPLICABLE,
            "label": "N/A",
            "description": "Not applicable (only when the game does not boot)",
        },
    ],
    "platforms": [
        {"value": "ios", "label": "iOS", "description": "iOS and iPadOS devices"},
        {"value": "macos", "label": "macOS", "description": "macOS devices"},
    ],
    "architectures": [
        {
            "value": "arm64",
            "label": "ARM64",
            "description": "Apple Silicon (all iOS, Apple Silicon Macs)",
        },
        {"value": "x86_64", "label": "x86_64", "description": "Intel (Intel Macs only)"},
    ],
    "gpuBackends": [
        {
            "value": "msl",
            "label": "MSL",
            "description": "Metal Shading Language (all platforms)",
        },
        {
            "value": "msc",
            "label": "MSC",
            "description": "Metal Shader Converter (macOS 15+ only)",
        },
    ],
}


def values(kind: str) -> list[str]:
    """Machine values for one schema section, in declaration order."""
    return [option["value"] for option in SCHEMA[kind]]


def label(kind: str, value: str) -> str:
    """Human label for a machine value, falling back to the value itself."""
    for option in SCHEMA[kind]:
        if option["value"] == value:
            return option["label"]
    return value


VALID_STATUSES = values("statuses")
VALID_PERFS = values("perfTiers")
VALID_PLATFORMS = values("platforms")
VALID_ARCHS = values("architectures")
VALID_GPU_BACKENDS = values("gpuBackends")

# Board / lookup ordering, most to least compatible
STATUS_ORDER = VALID_STATUSES

STATUS_EMOJI = {
    "playable": "✅",
    "ingame": "\U0001f7e6",
    "intro": "\U0001f7e8",
    "loads": "\U0001f7e7",
    "nothing": "\U0001f534",
}

PERF_EMOJI = {
    "great": "\U0001f680",
    "ok": "\U0001f44c",
    "poor": "\U0001f422",
    PERF_NOT_APPLICABLE: "➖",
}

PLATFORM_EMOJI = {
    "ios": "\U0001f4f1",
    "macos": "\U0001f5a5️",
}


def status_badge(status: str) -> str:
    return f"{STATUS_EMOJI.get(status, '')} {label('statuses', status)}".strip()


def perf_badge(perf: str) -> str:
    return f"{PERF_EMOJI.get(perf, '')} {label('perfTiers', perf)}".strip()


def platform_badge(platform: str) -> str:
    return f"{PLATFORM_EMOJI.get(platform, '')} {label('platforms', platform)}".strip()
