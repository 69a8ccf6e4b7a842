"""Authenticated report ingestion routes (app + GitHub workflow)"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from compat_api.core.dependencies import get_report_service, require_api_key
from compat_api.services import ReportService
from compat_shared.repositories import ConcurrencyConflictError, DocumentStoreError
from compat_shared.validation import validate_report

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"], dependencies=[Depends(require_api_key)])

# Channels allowed to tag themselves on /report
REPORT_SOURCES = {"app", "github"}


# ============================================
# Response Models
# ============================================


class ReportResponse(BaseModel):
    success: bool
    game: str
    status: str
    issueUrl: str


class BoardResponse(BaseModel):
    success: bool
    games: int
    messageId: str | None = None


# ============================================
# Endpoints
# ============================================


@router.post("/report", response_model=ReportResponse)
async def submit_report(
    request: Request,
    service: ReportService = Depends(get_report_service),
) -> ReportResponse:
    """Validate a report, commit it and update its projections"""
    try:
        body = json.loads(await request.body())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from None

    source = body.get("source") if isinstance(body, dict) else None
    if not isinstance(source, str) or source not in REPORT_SOURCES:
        source = "app"

    result = validate_report(body, source=source)
    if not result.ok or result.report is None:
        raise HTTPException(status_code=400, detail=result.error)

    try:
        outcome = await service.process(result.report)
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except DocumentStoreError as e:
        logger.exception(f"Report processing failed: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to process report: {e}") from None
    except Exception as e:
        logger.exception(f"Unexpected error while processing report: {e}")
        raise HTTPException(status_code=500, detail="Failed to process report") from None

    return ReportResponse(
        success=outcome.success,
        game=outcome.game,
        status=outcome.status,
        issueUrl=outcome.issue_url,
    )


@router.post("/board", response_model=BoardResponse)
async def rebuild_board(
    service: ReportService = Depends(get_report_service),
) -> BoardResponse:
    """Force a rebuild of the Discord status board from current data"""
    try:
        outcome = await service.rebuild_board()
    except DocumentStoreError as e:
        logger.error(f"Board rebuild failed: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch games: {e}") from None
    except Exception as e:
        logger.exception(f"Unexpected error while rebuilding board: {e}")
        raise HTTPException(status_code=500, detail="Failed to rebuild board") from None

    return BoardResponse(
        success=outcome.message_id is not None,
        games=outcome.games,
        messageId=outcome.message_id,
    )
