"""Shared data models for the compatibility service."""

from .game import Game, GameReport, LastReport, RecommendedSettings, games_from_json, games_to_json
from .interaction import (
    Command,
    FormSubmit,
    Interaction,
    PendingReport,
    Ping,
    UnknownInteraction,
)
from .report import SOURCE_LABELS, ReportPayload

__all__ = [
    "Command",
    "FormSubmit",
    "Game",
    "GameReport",
    "Interaction",
    "LastReport",
    "PendingReport",
    "Ping",
    "RecommendedSettings",
    "ReportPayload",
    "SOURCE_LABELS",
    "UnknownInteraction",
    "games_from_json",
    "games_to_json",
]
