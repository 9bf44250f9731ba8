"""Domain models for the task tracker."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, assert_never
from uuid import UUID

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Task status enumeration."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class UserIdentity(BaseModel):
    """Authenticated caller a task belongs to. Compared by ``id`` only."""

    id: str = Field(..., min_length=1, description="Stable user identifier")
    username: Optional[str] = Field(None, description="Display name, informational only")

    class Config:
        """Pydantic configuration."""
        frozen = True

    def same_user(self, other: "UserIdentity") -> bool:
        return self.id == other.id


class Task(BaseModel):
    """Task domain model.

    Frozen: the task service rebuilds tasks with ``model_copy(update=...)``
    instead of assigning fields.
    """

    id: Optional[UUID] = Field(None, description="Identifier assigned by the task store")
    title: str = Field(..., min_length=1, description="Sanitized task title")
    description: Optional[str] = Field(None, description="Sanitized task description")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Task status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    due_date: Optional[datetime] = Field(None, description="Optional due timestamp (UTC)")
    owner: UserIdentity = Field(..., description="User that created the task")
    created_at: datetime = Field(default_factory=utcnow, description="Task creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Task last update timestamp")

    class Config:
        """Pydantic configuration."""
        frozen = True

    def is_owned_by(self, user: UserIdentity) -> bool:
        """Check whether ``user`` owns this task."""
        return self.owner.same_user(user)


def is_valid_transition(current: TaskStatus, new_status: TaskStatus) -> bool:
    """Check a status change against the task state machine.

    Self-transitions are always allowed. Otherwise status only moves one step
    forward: PENDING -> IN_PROGRESS -> COMPLETED. COMPLETED is terminal.
    """
    if current == new_status:
        return True

    match current:
        case TaskStatus.PENDING:
            return new_status == TaskStatus.IN_PROGRESS
        case TaskStatus.IN_PROGRESS:
            return new_status == TaskStatus.COMPLETED
        case TaskStatus.COMPLETED:
            return False
        case _:
            assert_never(current)
