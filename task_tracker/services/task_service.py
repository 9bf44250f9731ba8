"""Task lifecycle service: validation, sanitization, ownership and status rules."""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from ..config import Settings
from ..exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..models.task import (
    Task,
    TaskPriority,
    TaskStatus,
    UserIdentity,
    is_valid_transition,
    utcnow,
)
from ..schemas import TaskRequest
from ..utils.logging import log_user_action
from .sanitizer import sanitize_text
from .task_store import InMemoryTaskStore, TaskStore

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Normalize ``value`` to aware UTC; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TaskService:
    """Governs the task lifecycle on top of a ``TaskStore``.

    The service keeps no task state of its own. Every mutation re-reads the
    task from the store, re-checks ownership and validates the input before
    saving a rebuilt copy.
    """

    def __init__(
        self,
        store: TaskStore,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the task service.

        Args:
            store: Task persistence collaborator
            settings: Application settings holding the length limits
            clock: Source of the current UTC time
        """
        settings = settings or Settings()
        self._store = store
        self._clock = clock
        self.title_max_length = settings.title_max_length
        self.description_max_length = settings.description_max_length
        logger.info(
            f"Task service initialized (title<={self.title_max_length}, "
            f"description<={self.description_max_length})"
        )

    # Validation

    def validate(self, request: TaskRequest) -> TaskRequest:
        """Validate and normalize a task request.

        Checks run in a fixed order: title presence, title length,
        description length, due date. Defaults and sanitization are applied
        only when every check passes. The given request is not modified.

        Args:
            request: Raw task input

        Returns:
            A new request with defaults filled in and text sanitized

        Raises:
            ValidationError: If any field violates the policy
        """
        try:
            title, due_date = self._check_fields(request)
            title, description = self._sanitize_fields(title, request.description)
        except ValidationError as e:
            logger.warning(f"Task validation failed on {e.field}: {e.message}")
            raise

        return request.model_copy(
            update={
                "title": title,
                "description": description,
                "due_date": due_date,
                "priority": request.priority or TaskPriority.MEDIUM,
                "status": request.status or TaskStatus.PENDING,
            }
        )

    def _check_fields(self, request: TaskRequest) -> Tuple[str, Optional[datetime]]:
        """Run the field checks; returns the trimmed title and UTC due date."""
        title = request.title.strip() if request.title is not None else ""
        if not title:
            raise ValidationError("title required", field="title")

        if len(title) > self.title_max_length:
            raise ValidationError("title too long", field="title")

        if (
            request.description is not None
            and len(request.description) > self.description_max_length
        ):
            raise ValidationError("description too long", field="description")

        if request.due_date is None:
            return title, None

        due_date = _as_utc(request.due_date)
        if due_date < self._clock():
            raise ValidationError("due date in past", field="due_date")
        return title, due_date

    def _sanitize_fields(
        self, title: str, description: Optional[str]
    ) -> Tuple[str, Optional[str]]:
        # Only length-checked text reaches the sanitizer patterns
        title = sanitize_text(title)
        # A title made only of script content sanitizes to nothing
        if not title:
            raise ValidationError("title required", field="title")
        return title, sanitize_text(description)

    def _check_transition(self, task: Task, new_status: TaskStatus) -> None:
        if not is_valid_transition(task.status, new_status):
            logger.warning(
                f"Rejected status change for task {task.id}: "
                f"{task.status.name} -> {new_status.name}"
            )
            raise InvalidTransitionError(task.status, new_status)

    def _find(self, task_id: UUID) -> Task:
        task = self._store.find_by_id(task_id)
        if task is None:
            logger.warning(f"Task {task_id} not found")
            raise NotFoundError(task_id)
        return task

    def _find_owned(self, task_id: UUID, owner: UserIdentity) -> Task:
        task = self._find(task_id)
        if not task.is_owned_by(owner):
            logger.warning(f"User {owner.id} denied access to task {task_id}")
            raise AuthorizationError(task_id, owner.id)
        return task

    # Lifecycle operations

    def create(self, request: TaskRequest, owner: UserIdentity) -> Task:
        """Create a task owned by ``owner``.

        Args:
            request: Task input
            owner: Authenticated caller

        Returns:
            Stored task with its assigned id

        Raises:
            ValidationError: If the input is invalid; nothing is stored
        """
        normalized = self.validate(request)
        now = self._clock()

        task = self._store.save(
            Task(
                title=normalized.title,
                description=normalized.description,
                status=normalized.status,
                priority=normalized.priority,
                due_date=normalized.due_date,
                owner=owner,
                created_at=now,
                updated_at=now,
            )
        )

        logger.info(f"Created task {task.id}: {task.title}")
        log_user_action(owner.id, "task_created", {"task_id": str(task.id)})
        return task

    def get(self, task_id: UUID, owner: UserIdentity) -> Task:
        """Get a task owned by ``owner``.

        Raises:
            NotFoundError: If no task has this id
            AuthorizationError: If the task belongs to another user
        """
        task = self._find_owned(task_id, owner)
        logger.debug(f"Retrieved task {task_id}: {task.title}")
        return task

    def update(self, task_id: UUID, request: TaskRequest, owner: UserIdentity) -> Task:
        """Update a task owned by ``owner``.

        Title and description are always replaced. Status, priority and due
        date are replaced only when given; omitted ones keep their values.

        Args:
            task_id: Task ID
            request: New task values
            owner: Authenticated caller

        Returns:
            Updated task

        Raises:
            NotFoundError: If no task has this id
            AuthorizationError: If the task belongs to another user
            ValidationError: If the new values are invalid
            InvalidTransitionError: If the requested status is not reachable
        """
        task = self._find_owned(task_id, owner)

        try:
            title, due_date = self._check_fields(request)
            title, description = self._sanitize_fields(title, request.description)
        except ValidationError as e:
            logger.warning(f"Update of task {task_id} failed on {e.field}: {e.message}")
            raise

        if request.status is not None:
            self._check_transition(task, request.status)

        changes = {
            "title": title,
            "description": description,
            "updated_at": self._clock(),
        }
        if request.status is not None:
            changes["status"] = request.status
        if request.priority is not None:
            changes["priority"] = request.priority
        if due_date is not None:
            changes["due_date"] = due_date

        updated = self._store.save(task.model_copy(update=changes))

        logger.info(f"Updated task {task_id}: {updated.title}")
        log_user_action(owner.id, "task_updated", {"task_id": str(task_id)})
        return updated

    def delete(self, task_id: UUID, owner: UserIdentity) -> None:
        """Delete a task owned by ``owner``.

        Raises:
            NotFoundError: If no task has this id
            AuthorizationError: If the task belongs to another user
        """
        task = self._find_owned(task_id, owner)
        self._store.delete(task)

        logger.info(f"Deleted task {task_id}: {task.title}")
        log_user_action(owner.id, "task_deleted", {"task_id": str(task_id)})

    def change_status(
        self,
        task_id: UUID,
        new_status: TaskStatus,
        owner: Optional[UserIdentity] = None,
    ) -> Task:
        """Move a task to ``new_status`` if the state machine allows it.

        Args:
            task_id: Task ID
            new_status: Requested status
            owner: Caller to check ownership against; skipped when None

        Returns:
            Task with the new status

        Raises:
            NotFoundError: If no task has this id
            AuthorizationError: If ``owner`` is given and does not own the task
            InvalidTransitionError: If the transition is not allowed
        """
        task = self._find_owned(task_id, owner) if owner is not None else self._find(task_id)
        self._check_transition(task, new_status)

        old_status = task.status
        updated = self._store.save(
            task.model_copy(update={"status": new_status, "updated_at": self._clock()})
        )

        logger.info(f"Updated task {task_id} status: {old_status.name} -> {new_status.name}")
        if owner is not None:
            log_user_action(
                owner.id,
                "task_status_changed",
                {"task_id": str(task_id), "from": old_status.value, "to": new_status.value},
            )
        return updated

    # Queries

    def list_tasks(self, owner: UserIdentity) -> List[Task]:
        """List tasks of ``owner``, most recently created first."""
        tasks = self._store.find_by_owner_order_by_created_desc(owner)
        logger.debug(f"Listed {len(tasks)} tasks for user {owner.id}")
        return tasks

    def list_tasks_by_status(self, owner: UserIdentity, status: TaskStatus) -> List[Task]:
        """List tasks of ``owner`` with the given status."""
        tasks = self._store.find_by_owner_and_status(owner, status)
        logger.debug(f"Listed {len(tasks)} {status.name} tasks for user {owner.id}")
        return tasks

    def list_tasks_by_due_date(self, owner: UserIdentity) -> List[Task]:
        """List tasks of ``owner`` by due date, soonest first, undated last."""
        return self._store.find_by_owner_order_by_due_date_asc(owner)


# Global task service instance - will be initialized during app startup
_task_service: Optional[TaskService] = None


def get_task_service() -> Optional[TaskService]:
    """Get the global task service instance.

    Returns:
        Task service instance or None if not initialized
    """
    return _task_service


def initialize_task_service(
    settings: Optional[Settings] = None,
    store: Optional[TaskStore] = None,
) -> TaskService:
    """Initialize the global task service instance.

    Args:
        settings: Application settings
        store: Task store to use; a fresh in-memory store when omitted

    Returns:
        Initialized task service
    """
    global _task_service
    _task_service = TaskService(store or InMemoryTaskStore(), settings=settings)
    return _task_service
