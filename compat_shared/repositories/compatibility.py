"""Repository for the canonical compatibility document.

The whole game list lives in one JSON file in a git repository. Reads return
the list together with the blob sha they saw; writes are conditioned on that
sha, so a write based on a stale read is rejected by the remote instead of
overwriting a newer version.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from compat_shared.models.game import Game, games_from_json, games_to_json

logger = logging.getLogger(__name__)


class ContentsAPI(Protocol):
    """The subset of a contents API the repository depends on."""

    async def get_contents(self, path: str, ref: str) -> dict[str, Any]: ...

    async def get_blob(self, sha: str) -> dict[str, Any]: ...

    async def put_contents(
        self, path: str, *, content_b64: str, sha: str, message: str, branch: str
    ) -> dict[str, Any]: ...


class DocumentStoreError(Exception):
    """The document could not be read or written."""


class ConcurrencyConflictError(DocumentStoreError):
    """The document changed since it was read; the write was rejected."""


@dataclass(frozen=True)
class Snapshot:
    games: list[Game]
    sha: str


def serialize_games(games: list[Game]) -> str:
    return json.dumps(games_to_json(games), indent=2, ensure_ascii=False) + "\n"


def _decode(content: str) -> str:
    return base64.b64decode(content.replace("\n", "")).decode("utf-8")


def _is_conflict(exc: Exception) -> bool:
    status = getattr(exc, "status_code", None)
    if status == 409:
        return True
    # Missing/mismatched sha can also come back as a 422 validation error
    return status == 422 and "sha" in str(getattr(exc, "body", "")).lower()


class CompatibilityRepository:
    """Read/write access to compatibility.json with optimistic concurrency."""

    def __init__(self, api: ContentsAPI, path: str, branch: str) -> None:
        self.api = api
        self.path = path
        self.branch = branch

    async def fetch_raw(self) -> tuple[list[dict[str, Any]], str]:
        """Return the parsed JSON array exactly as stored, plus its sha."""
        try:
            meta = await self.api.get_contents(self.path, self.branch)
            content = meta.get("content") or ""
            sha = meta["sha"]
            if not content or meta.get("encoding") == "none":
                # Above the inline size limit the content must be read as a blob
                content = (await self.api.get_blob(sha))["content"]
            data = json.loads(_decode(content))
        except DocumentStoreError:
            raise
        except Exception as e:
            raise DocumentStoreError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise DocumentStoreError(f"{self.path} must contain a JSON array")
        return data, sha

    async def fetch(self) -> Snapshot:
        """Return the current game list and the sha it was read at."""
        data, sha = await self.fetch_raw()
        try:
            games = games_from_json(data)
        except Exception as e:
            raise DocumentStoreError(f"{self.path} contains a malformed game entry: {e}") from e
        return Snapshot(games=games, sha=sha)

    async def commit(self, games: list[Game], sha: str, message: str) -> str:
        """Write ``games`` if the document is still at ``sha``; return the new sha.

        Raises ConcurrencyConflictError when the document moved on. No retry
        is attempted: the caller has to resubmit.
        """
        encoded = base64.b64encode(serialize_games(games).encode("utf-8")).decode("ascii")
        try:
            result = await self.api.put_contents(
                self.path,
                content_b64=encoded,
                sha=sha,
                message=message,
                branch=self.branch,
            )
        except Exception as e:
            if _is_conflict(e):
                logger.warning(f"Commit rejected, {self.path} changed since sha {sha[:7]}")
                raise ConcurrencyConflictError(
                    "The compatibility list changed while this report was being saved. "
                    "Please submit the report again."
                ) from e
            raise DocumentStoreError(f"Failed to write {self.path}: {e}") from e

        new_sha = ((result or {}).get("content") or {}).get("sha", "")
        logger.info(f"Committed {self.path} ({len(games)} games) -> {new_sha[:7]}")
        return new_sha
