"""
API Schemas for shared goals and partner tasks.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from partnerhub.infra.db.models.partner_task import TaskPriority


# ============================================================================
# Goals
# ============================================================================

class GoalCreate(BaseModel):
    partnership_id: str
    title: str = Field(..., min_length=1, max_length=255)
    category: str
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    support_style: Optional[str] = None
    accountability: Optional[dict] = None


class GoalUpdate(BaseModel):
    """Owner-editable fields. Progress is derived and cannot be set."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    deadline: Optional[datetime] = None
    support_style: Optional[str] = None
    accountability: Optional[dict] = None
    is_shared: Optional[bool] = None


class GoalResponse(BaseModel):
    id: str
    partnership_id: str
    owner_id: str
    partner_id: str
    title: str
    description: Optional[str] = None
    category: str
    deadline: Optional[datetime] = None
    support_style: Optional[str] = None
    accountability: dict = Field(default_factory=dict)
    progress: dict = Field(default_factory=dict)
    is_completed: bool
    is_shared: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


# ============================================================================
# Tasks
# ============================================================================

class VerificationActionInput(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REDO = "request_redo"


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_time: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    verification_required: Optional[bool] = Field(
        None, description="Defaults to the goal's accountability setting"
    )


class MarkDoneRequest(BaseModel):
    evidence: Optional[str] = Field(None, description="Link to proof of completion")
    comment: Optional[str] = None


class VerifyRequest(BaseModel):
    action: VerificationActionInput
    comment: Optional[str] = None


class HistoryEntry(BaseModel):
    action: str
    by: str
    at: str
    comment: Optional[str] = None


class TaskResponse(BaseModel):
    id: str
    shared_goal_id: str
    partnership_id: str
    owner_id: str
    partner_id: str
    title: str
    description: Optional[str] = None
    priority: str
    estimated_time: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    status: str
    verification_status: str
    verification_required: bool
    due_date: Optional[datetime] = None
    started_at: Optional[datetime] = None
    marked_done_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    verification_comment: Optional[str] = None
    verification_evidence: Optional[str] = None
    verification_history: list[HistoryEntry] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
