from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from threading import RLock
from typing import Callable, Dict, List, Optional

from .errors import TaskNotFoundError, TaskValidationError
from .models import TaskEntity
from .settings import get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Columns the storage layer refuses to hold as NULL.
REQUIRED_FIELDS = ("title", "status")


@dataclass(frozen=True)
class PageRequest:
    """
    Zero-based page window. Results are always ordered by modified_on descending.
    """
    page: int = 0
    size: int = 10

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if self.size < 1:
            raise ValueError("size must be >= 1")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class Page:
    """One window of tasks plus the totals needed to render paging controls."""
    items: List[TaskEntity] = field(default_factory=list)
    page: int = 0
    size: int = 10
    total_elements: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size else 0

    @property
    def first(self) -> bool:
        return self.page == 0

    @property
    def last(self) -> bool:
        return self.page + 1 >= self.total_pages


def check_required(task: TaskEntity) -> None:
    missing = [name for name in REQUIRED_FIELDS if task.get(name) is None]
    if missing:
        raise TaskValidationError(f"NOT NULL constraint failed: tasks.{missing[0]}")


# PUBLIC_INTERFACE
class TaskStore(ABC):
    """Abstract persistence contract for Task records."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or datetime.now

    def _now(self) -> datetime:
        return self._clock()

    @abstractmethod
    def save(self, task: TaskEntity) -> TaskEntity:
        """
        Insert the task when it has no id, otherwise overwrite the stored record.
        An id with no stored record raises TaskNotFoundError; ids are never reused.
        created_on is stamped on insert only; modified_on on every save.
        """

    @abstractmethod
    def find_by_id(self, task_id: int) -> Optional[TaskEntity]:
        """Return the task with this id, or None."""

    @abstractmethod
    def delete_by_id(self, task_id: int) -> bool:
        """Delete the task if present. Return True if a record was removed."""

    @abstractmethod
    def find_all(self, request: PageRequest) -> Page:
        """Return one page of all tasks, most recently modified first."""

    @abstractmethod
    def find_by_status(self, status: str, request: PageRequest) -> Page:
        """Return one page of tasks whose status equals `status` exactly."""


class InMemoryTaskStore(TaskStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self._lock = RLock()
        self._items: Dict[int, TaskEntity] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        i = self._next_id
        self._next_id += 1
        return i

    def save(self, task: TaskEntity) -> TaskEntity:
        check_required(task)
        with self._lock:
            now = self._now()
            record: TaskEntity = task.copy()
            if record["id"] is None:
                record["id"] = self._allocate_id()
                record["created_on"] = now
            else:
                existing = self._items.get(record["id"])
                if existing is None:
                    raise TaskNotFoundError(record["id"])
                record["created_on"] = existing["created_on"]
            record["modified_on"] = now

            self._items[record["id"]] = record
            return record.copy()

    def find_by_id(self, task_id: int) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def delete_by_id(self, task_id: int) -> bool:
        with self._lock:
            return self._items.pop(task_id, None) is not None

    def find_all(self, request: PageRequest) -> Page:
        with self._lock:
            return self._page(list(self._items.values()), request)

    def find_by_status(self, status: str, request: PageRequest) -> Page:
        with self._lock:
            return self._page([t for t in self._items.values() if t["status"] == status], request)

    def _page(self, items: List[TaskEntity], request: PageRequest) -> Page:
        items_sorted = sorted(items, key=lambda t: (t["modified_on"], t["id"]), reverse=True)
        window = items_sorted[request.offset:request.offset + request.size]
        # Return copies to avoid external mutation
        return Page(
            items=[t.copy() for t in window],
            page=request.page,
            size=request.size,
            total_elements=len(items_sorted),
        )


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_task_store() -> TaskStore:
    """
    Return the process-wide store for the configured backend.
    - memory: InMemoryTaskStore
    - sqlite: SQLiteTaskStore at settings.sqlite_db_path
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteTaskStore

        logger.info("Using sqlite task store at %s", settings.sqlite_db_path)
        return SQLiteTaskStore(settings.sqlite_db_path)
    logger.info("Using in-memory task store")
    return InMemoryTaskStore()
