"""
Assistant API Endpoints

FastAPI routes for running an instruction and reading the progress log.

The caller is identified by `Authorization: Bearer <token>`; progress entries
are always filtered to that caller.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from assistant.config import AssistantSettings, load_env_files
from assistant.errors import AuthenticationError
from assistant.runner import AssistantRunner, build_runner
from utils.logging_config import setup_logging
from utils.response import json_safe, standard_response

router = APIRouter()
logger = logging.getLogger(__name__)


class AssistantRequest(BaseModel):
    """Request model for POST /assistant."""
    prompt: str
    accountId: str


class AssistantResponse(BaseModel):
    """Response model for POST /assistant."""
    success: bool
    runId: Optional[str] = None
    orderId: Optional[str] = None
    companyId: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


@lru_cache(maxsize=1)
def get_runner() -> AssistantRunner:
    return build_runner()


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_user(
    authorization: Optional[str] = Header(default=None),
    runner: AssistantRunner = Depends(get_runner),
) -> Dict[str, Any]:
    try:
        return runner.authenticate(_bearer_token(authorization))
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.post("/assistant", response_model=AssistantResponse)
def post_assistant(
    request: AssistantRequest,
    user: Dict[str, Any] = Depends(current_user),
    runner: AssistantRunner = Depends(get_runner),
):
    """
    Run one instruction through the assistant.

    Returns 400 for a blank prompt or account, 401 for a rejected token and
    500 (with the same body shape) when the run failed.
    """
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="prompt is required")
    if not request.accountId.strip():
        raise HTTPException(status_code=400, detail="accountId is required")

    result = runner.execute(request.prompt, request.accountId.strip(), user["user_id"])
    if not result.get("success"):
        return JSONResponse(status_code=500, content=AssistantResponse(**result).model_dump())
    return AssistantResponse(**result)


@router.get("/assistant/updates")
def get_run_updates(
    runId: str = Query(..., min_length=1),
    user: Dict[str, Any] = Depends(current_user),
    runner: AssistantRunner = Depends(get_runner),
):
    """Progress entries of one run, oldest first."""
    updates = runner.run_updates(user["user_id"], runId)
    return standard_response(True, data=[_public_update(u) for u in updates])


@router.get("/assistant/updates/latest")
def get_latest_update(
    since: Optional[str] = Query(default=None),
    user: Dict[str, Any] = Depends(current_user),
    runner: AssistantRunner = Depends(get_runner),
):
    """The caller's most recent progress entry created after `since`, or null."""
    try:
        update = runner.latest_update(user["user_id"], since)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid since timestamp: {since!r}")
    return standard_response(True, data=_public_update(update) if update else None)


def _public_update(item: Dict[str, Any]) -> Dict[str, Any]:
    return json_safe({
        "updateId": item.get("update_id"),
        "runId": item.get("run_id"),
        "userId": item.get("user_id"),
        "content": item.get("content"),
        "createdAt": item.get("created_at"),
    })


def create_app() -> FastAPI:
    # Load .env first, then .env.local (which can override)
    load_env_files()
    settings = AssistantSettings.from_env()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="AutoCRM Assistant")
    app.include_router(router)
    return app
