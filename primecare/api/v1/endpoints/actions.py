"""
Action log endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Body, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
import logging

from primecare.core.database import get_db
from primecare.core.timeutils import to_naive_utc
from primecare.models.action_log import ActionType
from primecare.schemas.action_log import ActionLogCreate, ActionLogValidationError, VALID_ACTION_TYPES
from primecare.services.action_log import (
    DEFAULT_PAGE_SIZE,
    create_action_log,
    list_action_logs,
    serialize_action_log,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/log")
def log_action(
    payload: dict = Body(...),
    db: Session = Depends(get_db)
):
    """Record a customer or system interaction with a machine"""
    try:
        data = ActionLogCreate.from_payload(payload)
    except ActionLogValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        action_log = create_action_log(
            db,
            machine_id=data.machine_id,
            action_type=data.action_type,
            channel=data.channel,
            metadata=data.metadata.model_dump(exclude_none=True),
        )
    except Exception:
        db.rollback()
        logger.error("Error creating action log", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to create action log"})

    return {"success": True, "actionLog": serialize_action_log(action_log)}


@router.get("/log")
def get_action_logs(
    machineId: Optional[int] = Query(None),
    actionType: Optional[str] = Query(None),
    since: Optional[datetime] = Query(None),
    until: Optional[datetime] = Query(None),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db)
):
    """List action logs, newest first"""
    if actionType and actionType not in VALID_ACTION_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid actionType. Must be one of: {', '.join(VALID_ACTION_TYPES)}"
        )

    try:
        logs = list_action_logs(
            db,
            machine_id=machineId,
            action_type=ActionType(actionType) if actionType else None,
            since=to_naive_utc(since),
            until=to_naive_utc(until),
            limit=limit,
        )
    except Exception:
        db.rollback()
        logger.error("Error fetching action logs", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch action logs"})

    return {
        "success": True,
        "actionLogs": [serialize_action_log(log) for log in logs],
        "count": len(logs),
    }
