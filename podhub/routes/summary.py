"""
Summary routes: AI summaries of episode transcripts.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..config import get_db, get_summary_service
from ..database import Database
from ..exceptions import SummaryError, SummaryNotConfiguredError
from ..schemas import SummaryRequest, SummaryResponse
from ..summarizer import ModelConfig, SummaryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["summary"])


@router.post("/summary", response_model=SummaryResponse)
def summarize(
    request: SummaryRequest,
    db: Annotated[Database, Depends(get_db)],
    service: Annotated[SummaryService, Depends(get_summary_service)],
):
    """Return the stored summary, or generate and store one."""
    logger.info(f"Received summary request for {request.guid or '<no guid>'}, model: {request.model or 'default'}")
    episode = db.get_episode(request.guid) if request.guid else None

    try:
        result = service.summarize(
            episode,
            request.srt_content,
            ModelConfig(api_key=request.api_key, api_base=request.api_base, model=request.model),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SummaryNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SummaryError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return SummaryResponse(summary=result.text, cached=result.cached)
