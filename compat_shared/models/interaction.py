"""Discord interaction payloads, parsed into a closed set of variants.

Raw interaction JSON never travels past ``parse_interaction``; handlers only
see the dataclasses below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import discord
from discord.enums import try_enum


@dataclass(frozen=True)
class Ping:
    """Endpoint verification probe."""


@dataclass(frozen=True)
class Command:
    """Slash command invocation."""

    id: str
    token: str
    name: str
    options: dict[str, Any] = field(default_factory=dict)
    user: str | None = None
    attachment_url: str | None = None

    def option(self, name: str, default: str = "") -> str:
        value = self.options.get(name)
        return default if value is None else str(value)


@dataclass(frozen=True)
class FormSubmit:
    """Modal submission."""

    id: str
    token: str
    custom_id: str
    fields: dict[str, str] = field(default_factory=dict)
    user: str | None = None


@dataclass(frozen=True)
class UnknownInteraction:
    type: int


Interaction = Ping | Command | FormSubmit | UnknownInteraction


@dataclass(frozen=True)
class PendingReport:
    """Choices captured by /report while the modal is open."""

    status: str
    perf: str
    device: str
    os_version: str
    arch: str
    gpu_backend: str
    submitted_by: str | None = None
    attachment_url: str | None = None


def _display_name(payload: dict[str, Any]) -> str | None:
    """Guild interactions carry member.user, DMs carry user."""
    user = (payload.get("member") or {}).get("user") or payload.get("user")
    if not user:
        return None
    return user.get("global_name") or user.get("username")


def _attachment_url(data: dict[str, Any], options: list[dict[str, Any]]) -> str | None:
    attachments = (data.get("resolved") or {}).get("attachments") or {}
    for opt in options:
        if opt.get("type") == discord.AppCommandOptionType.attachment.value:
            attachment = attachments.get(str(opt.get("value")))
            if attachment:
                return attachment.get("url")
    return None


def _modal_fields(components: list[dict[str, Any]]) -> dict[str, str]:
    """Collect text input values from action rows (or label components)."""
    values: dict[str, str] = {}
    for row in components:
        children = row.get("components")
        if children is None and row.get("component") is not None:
            children = [row["component"]]
        for comp in children or []:
            custom_id = comp.get("custom_id")
            if custom_id:
                values[custom_id] = comp.get("value") or ""
    return values


def parse_interaction(payload: dict[str, Any]) -> Interaction:
    """Map a verified interaction payload onto an internal variant."""
    interaction_type = try_enum(discord.InteractionType, payload.get("type"))
    data = payload.get("data") or {}

    if interaction_type is discord.InteractionType.ping:
        return Ping()

    if interaction_type is discord.InteractionType.application_command:
        options = data.get("options") or []
        return Command(
            id=str(payload.get("id", "")),
            token=payload.get("token", ""),
            name=data.get("name", ""),
            options={opt.get("name"): opt.get("value") for opt in options},
            user=_display_name(payload),
            attachment_url=_attachment_url(data, options),
        )

    if interaction_type is discord.InteractionType.modal_submit:
        return FormSubmit(
            id=str(payload.get("id", "")),
            token=payload.get("token", ""),
            custom_id=data.get("custom_id", ""),
            fields=_modal_fields(data.get("components") or []),
            user=_display_name(payload),
        )

    raw_type = payload.get("type")
    return UnknownInteraction(type=raw_type if isinstance(raw_type, int) else -1)
