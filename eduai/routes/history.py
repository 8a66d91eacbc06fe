from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..infra.activity_db import ActivityRepository, get_activity_repository
from ..models.activity import Activity
from ..schemas import HistoryResponse, RecordActivityRequest, RecordActivityResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=HistoryResponse)
def get_history(
    email: Optional[str] = Query(None),
    x_user_email: Optional[str] = Header(None),
    repo: ActivityRepository = Depends(get_activity_repository),
):
    """
    List a user's activities, newest first. The user comes from `?email=` or the
    `x-user-email` header. A store failure still returns an empty list.
    """
    user_email = email or x_user_email
    if not user_email:
        raise HTTPException(status_code=400, detail="User email is required")

    try:
        activities = repo.list_activities_by_user(user_email)
    except Exception as e:
        logger.exception("History fetch failed for %s", user_email)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch history", "details": str(e), "activities": []},
        )

    return HistoryResponse(activities=activities, total=len(activities), user=user_email)


@router.post("", response_model=RecordActivityResponse)
def record_activity(
    req: RecordActivityRequest,
    repo: ActivityRepository = Depends(get_activity_repository),
):
    """
    Append one activity to a user's history.
    """
    if not req.userEmail or not req.activityType or not req.title:
        raise HTTPException(status_code=400, detail="Missing required fields: userEmail, activityType, title")

    try:
        activity = Activity(
            user_email=req.userEmail,
            type=req.activityType,
            title=req.title,
            input_text=req.inputText or "",
            result=req.result,
            status=req.status,
            duration=req.duration or 0,
            metadata=req.metadata or {},
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid activity: {e.errors()[0]['msg']}")

    try:
        activity_id = repo.create_activity(activity)
    except Exception as e:
        logger.exception("Activity recording failed for %s", req.userEmail)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to record activity", "details": str(e)},
        )

    return RecordActivityResponse(success=True, activityId=activity_id, message="Activity recorded successfully")
