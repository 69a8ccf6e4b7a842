"""Public read-only routes: schema and game list"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from compat_api.core.dependencies import get_compat_repository
from compat_shared.repositories import CompatibilityRepository, DocumentStoreError
from compat_shared.schema import SCHEMA

logger = logging.getLogger(__name__)

router = APIRouter(tags=["games"])


@router.get("/schema")
async def get_schema() -> dict[str, Any]:
    """Valid field values for building report forms"""
    return SCHEMA


@router.get("/games")
async def get_games(
    repository: CompatibilityRepository = Depends(get_compat_repository),
) -> list[dict[str, Any]]:
    """All games, exactly as stored in the canonical document"""
    try:
        games, _sha = await repository.fetch_raw()
        return games
    except DocumentStoreError as e:
        logger.error(f"Failed to fetch games: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch games: {e}") from None
