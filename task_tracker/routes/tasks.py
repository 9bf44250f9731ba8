"""Task management CRUD routes."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..config import Settings
from ..deps import get_current_user, get_settings, get_task_service
from ..exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    TaskServiceError,
    ValidationError,
)
from ..models.task import TaskStatus, UserIdentity
from ..schemas import StatusChange, TaskListResponse, TaskRequest, TaskResponse
from ..services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter()


class TaskHTTPException(HTTPException):
    """HTTP error that keeps the service's machine-readable error code."""

    def __init__(self, status_code: int, detail: str, error_code: Optional[str] = None):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code


def _http_error(exc: TaskServiceError, settings: Settings) -> HTTPException:
    """Map a task service failure to an HTTP error."""
    if isinstance(exc, ValidationError):
        return TaskHTTPException(
            status.HTTP_400_BAD_REQUEST, exc.message, error_code=exc.error_code
        )

    if isinstance(exc, AuthorizationError):
        if settings.hide_foreign_tasks:
            # Indistinguishable from a missing task
            return TaskHTTPException(
                status.HTTP_404_NOT_FOUND,
                f"Task {exc.task_id} not found",
                error_code="not_found",
            )
        return TaskHTTPException(
            status.HTTP_403_FORBIDDEN, "Access denied", error_code=exc.error_code
        )

    if isinstance(exc, NotFoundError):
        return TaskHTTPException(
            status.HTTP_404_NOT_FOUND, exc.message, error_code=exc.error_code
        )

    if isinstance(exc, InvalidTransitionError):
        return TaskHTTPException(
            status.HTTP_409_CONFLICT,
            f"Invalid status transition: {exc.message}",
            error_code=exc.error_code,
        )

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskRequest,
    user: UserIdentity = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    settings: Settings = Depends(get_settings),
) -> TaskResponse:
    """Create a new task for the caller.

    Raises:
        HTTPException: 400 if the input is invalid
    """
    try:
        task = task_service.create(task_data, user)
        return TaskResponse.from_task(task)

    except TaskServiceError as e:
        raise _http_error(e, settings)


@router.get("/", response_model=TaskListResponse)
async def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    user: UserIdentity = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    """List the caller's tasks, newest first, optionally filtered by status."""
    logger.debug(f"Listing tasks for {user.id} with status={status_filter}")

    if status_filter is not None:
        tasks = task_service.list_tasks_by_status(user, status_filter)
    else:
        tasks = task_service.list_tasks(user)

    return TaskListResponse(
        tasks=[TaskResponse.from_task(task) for task in tasks],
        total=len(tasks),
    )


@router.get("/by-due-date", response_model=TaskListResponse)
async def list_tasks_by_due_date(
    user: UserIdentity = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    """List the caller's tasks by due date, soonest first, undated last."""
    tasks = task_service.list_tasks_by_due_date(user)

    return TaskListResponse(
        tasks=[TaskResponse.from_task(task) for task in tasks],
        total=len(tasks),
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: UUID,
    user: UserIdentity = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    settings: Settings = Depends(get_settings),
) -> TaskResponse:
    """Get one of the caller's tasks by ID.

    Raises:
        HTTPException: 404 if task not found
    """
    try:
        return TaskResponse.from_task(task_service.get(task_id, user))

    except TaskServiceError as e:
        raise _http_error(e, settings)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    task_data: TaskRequest,
    user: UserIdentity = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    settings: Settings = Depends(get_settings),
) -> TaskResponse:
    """Update one of the caller's tasks.

    Raises:
        HTTPException: 400 on invalid input, 404 if not found, 409 on an
            illegal status change
    """
    try:
        logger.info(f"Updating task: {task_id}")
        task = task_service.update(task_id, task_data, user)
        return TaskResponse.from_task(task)

    except TaskServiceError as e:
        raise _http_error(e, settings)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def change_task_status(
    task_id: UUID,
    change: StatusChange,
    user: UserIdentity = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    settings: Settings = Depends(get_settings),
) -> TaskResponse:
    """Move one of the caller's tasks to a new status.

    Raises:
        HTTPException: 404 if not found, 409 on an illegal transition
    """
    try:
        logger.info(f"Changing status of task {task_id} to {change.status.name}")
        task = task_service.change_status(task_id, change.status, owner=user)
        return TaskResponse.from_task(task)

    except TaskServiceError as e:
        raise _http_error(e, settings)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    user: UserIdentity = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    settings: Settings = Depends(get_settings),
):
    """Delete one of the caller's tasks.

    Raises:
        HTTPException: 404 if task not found
    """
    try:
        logger.info(f"Deleting task: {task_id}")
        task_service.delete(task_id, user)

    except TaskServiceError as e:
        raise _http_error(e, settings)
