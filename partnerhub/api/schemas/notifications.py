"""
API Schemas for partner notifications.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: str
    partnership_id: str
    from_user_id: str
    to_user_id: str
    type: str
    title: str
    message: str
    priority: str
    related_task_id: Optional[str] = None
    related_goal_id: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    
    class Config:
        from_attributes = True


class DrainResponse(BaseModel):
    delivered: int
