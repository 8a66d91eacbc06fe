from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from ..constants import ActivityType, ActivityStatus


class Activity(BaseModel):
    """
    One user-facing operation and its outcome, as stored in the history.
    """
    id: Optional[int] = None  # Assigned by the database
    user_email: str
    type: ActivityType
    title: str
    input_text: str = ""
    result: Optional[Any] = None
    status: ActivityStatus = ActivityStatus.COMPLETED
    duration: int = 0
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        use_enum_values = True
