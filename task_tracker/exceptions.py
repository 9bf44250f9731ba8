"""
Exception hierarchy for the task lifecycle layer.

Every failure is deterministic and raised to the caller immediately; the
request layer decides how each one is presented.
"""

from typing import Any, Optional
from uuid import UUID


class TaskServiceError(Exception):
    """Base exception for all task service errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class ValidationError(TaskServiceError, ValueError):
    """Task input that violates the validation policy."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "validation_error")
        super().__init__(message, **kwargs)
        self.field = field


class NotFoundError(TaskServiceError, LookupError):
    """Referenced task does not exist."""

    def __init__(self, task_id: UUID, **kwargs):
        kwargs.setdefault("error_code", "not_found")
        super().__init__(f"Task {task_id} not found", **kwargs)
        self.task_id = task_id


class AuthorizationError(TaskServiceError):
    """Task exists but belongs to another user."""

    def __init__(self, task_id: UUID, owner_id: str, **kwargs):
        kwargs.setdefault("error_code", "access_denied")
        super().__init__(
            f"Access denied: task {task_id} does not belong to user {owner_id}",
            **kwargs,
        )
        self.task_id = task_id
        self.owner_id = owner_id


class InvalidTransitionError(TaskServiceError):
    """Status change not permitted by the task state machine."""

    def __init__(self, current: Any, requested: Any, **kwargs):
        kwargs.setdefault("error_code", "invalid_transition")
        current_name = getattr(current, "name", str(current))
        requested_name = getattr(requested, "name", str(requested))
        super().__init__(f"{current_name} → {requested_name}", **kwargs)
        self.current = current
        self.requested = requested
