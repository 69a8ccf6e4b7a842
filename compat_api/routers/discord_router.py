"""Discord interactions endpoint (Ed25519 verified)"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import JSONResponse

from compat_api.core.dependencies import get_interaction_service, require_discord_signature
from compat_api.services import InteractionService
from compat_shared.models.interaction import parse_interaction

logger = logging.getLogger(__name__)

router = APIRouter(tags=["discord"])


@router.post("/discord")
async def discord_interactions(
    background_tasks: BackgroundTasks,
    body: bytes = Depends(require_discord_signature),
    service: InteractionService = Depends(get_interaction_service),
) -> JSONResponse:
    """Handle a Discord interaction.

    Deferred work is queued as a background task, which Starlette runs after
    the acknowledgement has been sent.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from None
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid interaction payload")

    reply = await service.handle(parse_interaction(payload))
    if reply.background is not None:
        background_tasks.add_task(reply.background)
    return JSONResponse(reply.body, status_code=reply.status_code)
