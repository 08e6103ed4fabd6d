from __future__ import annotations

import logging
from typing import Optional

from .errors import TaskNotFoundError
from .models import DEFAULTS, TaskDefaults, TaskEntity, new_entity
from .repositories import Page, PageRequest, TaskStore
from .schemas import TaskIn

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"

# Larger page sizes are capped rather than rejected.
MAX_PAGE_SIZE = 1000


# PUBLIC_INTERFACE
class TaskService:
    """
    Business rules for tasks: defaults on create, merge on update, not-found
    signalling. Everything else is delegated to the store.
    """

    def __init__(self, store: TaskStore, defaults: TaskDefaults = DEFAULTS) -> None:
        self._store = store
        self._defaults = defaults

    def list_tasks(self, status: Optional[str] = None, page: int = 0, size: int = 10) -> Page:
        """
        List one page of tasks, newest modification first.

        A status of None, "" or "All" (any casing) means no filter. size is
        capped at MAX_PAGE_SIZE.
        """
        request = PageRequest(page=page, size=min(size, MAX_PAGE_SIZE))
        if status and status.lower() != ALL_STATUSES:
            return self._store.find_by_status(status, request)
        return self._store.find_all(request)

    def create_task(self, data: TaskIn, actor: Optional[str] = None) -> TaskEntity:
        user = actor or self._defaults.actor
        task = new_entity(
            title=data.title,
            description=data.description,
            status=data.status or self._defaults.status,
            priority=data.priority or self._defaults.priority,
            due_date=data.due_date,
            created_by=user,
            modified_by=user,
        )
        created = self._store.save(task)
        logger.info("Created task %s (status=%s)", created["id"], created["status"])
        return created

    def update_task(self, task_id: int, data: TaskIn, actor: Optional[str] = None) -> TaskEntity:
        """
        Merge `data` into the stored task.

        title, description and due_date are replaced outright, even with None.
        status and priority are replaced only when given. modified_by falls back
        to the default actor. id, created_by and created_on never change.
        """
        existing = self._store.find_by_id(task_id)
        if existing is None:
            logger.warning("Update of unknown task %s", task_id)
            raise TaskNotFoundError(task_id)

        merged: TaskEntity = existing.copy()
        merged["title"] = data.title
        merged["description"] = data.description
        merged["due_date"] = data.due_date
        if data.status is not None:
            merged["status"] = data.status
        if data.priority is not None:
            merged["priority"] = data.priority
        merged["modified_by"] = actor or self._defaults.actor

        updated = self._store.save(merged)
        logger.info("Updated task %s (status=%s)", task_id, updated["status"])
        return updated

    def delete_task(self, task_id: int) -> None:
        removed = self._store.delete_by_id(task_id)
        logger.info("Deleted task %s (existed=%s)", task_id, removed)
