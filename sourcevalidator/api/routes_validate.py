"""Validation endpoint — does the page at a URL match a query?"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from sourcevalidator.api.deps import get_orchestrator
from sourcevalidator.api.models import ValidateResponse
from sourcevalidator.api.rate_limit import request_client_identifier
from sourcevalidator.orchestrator import ValidationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/validate", tags=["validate"])


@router.post("", response_model=ValidateResponse, response_model_by_alias=True)
def validate(
    request: Request,
    body: Any = Body(default=None),
    orchestrator: ValidationOrchestrator = Depends(get_orchestrator),
):
    """Fetch the URL's text and ask the selected LLM whether it matches the query."""
    client_id = request_client_identifier(request)
    outcome = orchestrator.handle(client_id, body)
    return JSONResponse(
        status_code=outcome.status_code,
        content=outcome.response.to_json(),
        headers=outcome.headers or None,
    )
