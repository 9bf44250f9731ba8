"""Task persistence collaborator and its in-memory implementation."""

import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from ..models.task import Task, TaskStatus, UserIdentity

logger = logging.getLogger(__name__)


class TaskStore(ABC):
    """Persistence interface the task service depends on."""

    @abstractmethod
    def save(self, task: Task) -> Task:
        """Insert or replace ``task``; assigns an id when it has none."""
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, task_id: UUID) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, task: Task) -> None:
        raise NotImplementedError

    @abstractmethod
    def find_by_owner_order_by_created_desc(self, owner: UserIdentity) -> List[Task]:
        raise NotImplementedError

    @abstractmethod
    def find_by_owner_and_status(self, owner: UserIdentity, status: TaskStatus) -> List[Task]:
        raise NotImplementedError

    @abstractmethod
    def find_by_owner_order_by_due_date_asc(self, owner: UserIdentity) -> List[Task]:
        raise NotImplementedError


class InMemoryTaskStore(TaskStore):
    """Thread-safe dictionary-backed task store."""

    def __init__(self):
        """Initialize the in-memory store."""
        self._tasks: Dict[UUID, Task] = {}
        self._lock = Lock()  # Thread-safe operations
        logger.info("In-memory task store initialized")

    def save(self, task: Task) -> Task:
        with self._lock:
            if task.id is None:
                task = task.model_copy(update={"id": uuid4()})
            self._tasks[task.id] = task
            logger.debug(f"Saved task {task.id}")
            return task

    def find_by_id(self, task_id: UUID) -> Optional[Task]:
        with self._lock:
            return self._tasks.get(task_id)

    def delete(self, task: Task) -> None:
        with self._lock:
            self._tasks.pop(task.id, None)
            logger.debug(f"Removed task {task.id}")

    def find_by_owner_order_by_created_desc(self, owner: UserIdentity) -> List[Task]:
        with self._lock:
            # Reversed insertion order first, so the stable sort puts the
            # later insert first when timestamps tie.
            tasks = [t for t in reversed(self._tasks.values()) if t.is_owned_by(owner)]
        tasks.sort(key=lambda t: t.created_at, reverse=True)
        return tasks

    def find_by_owner_and_status(self, owner: UserIdentity, status: TaskStatus) -> List[Task]:
        with self._lock:
            return [
                t for t in self._tasks.values()
                if t.is_owned_by(owner) and t.status == status
            ]

    def find_by_owner_order_by_due_date_asc(self, owner: UserIdentity) -> List[Task]:
        with self._lock:
            tasks = [t for t in self._tasks.values() if t.is_owned_by(owner)]

        # Undated tasks sort last
        def sort_key(task: Task):
            return (task.due_date is None, task.due_date or task.created_at)

        tasks.sort(key=sort_key)
        return tasks

    def count(self) -> int:
        """Total number of stored tasks across all owners."""
        with self._lock:
            return len(self._tasks)
