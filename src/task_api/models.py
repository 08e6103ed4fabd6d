from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TypedDict

TASK_STATUSES = ("Open", "In Progress", "Done")
TASK_PRIORITIES = ("Low", "Medium", "High")


@dataclass(frozen=True)
class TaskDefaults:
    """
    Values applied to fields a caller leaves unset.

    Priority uses title case so it reads the same way as the status values.
    """

    status: str = "Open"
    priority: str = "Medium"
    actor: str = "SYSTEM"


DEFAULTS = TaskDefaults()


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A Task record as it is stored and returned by task stores.

    Fields:
    - id: Integer identifier, None until the record is first saved
    - title: Required at the storage layer
    - description: Optional free text
    - status: One of TASK_STATUSES (not enforced)
    - priority: One of TASK_PRIORITIES (not enforced)
    - due_date: Optional due datetime
    - created_by / modified_by: Audit user names
    - created_on / modified_on: Audit timestamps, stamped by the store
    """

    id: Optional[int]
    title: Optional[str]
    description: Optional[str]
    status: Optional[str]
    priority: Optional[str]
    due_date: Optional[datetime]
    created_by: Optional[str]
    created_on: Optional[datetime]
    modified_by: Optional[str]
    modified_on: Optional[datetime]


def new_entity(**fields) -> TaskEntity:
    """Return a TaskEntity with every field present, unset ones as None."""
    entity: TaskEntity = {
        "id": None,
        "title": None,
        "description": None,
        "status": None,
        "priority": None,
        "due_date": None,
        "created_by": None,
        "created_on": None,
        "modified_by": None,
        "modified_on": None,
    }
    unknown = set(fields) - set(entity)
    if unknown:
        raise TypeError(f"Unknown task fields: {sorted(unknown)}")
    entity.update(fields)  # type: ignore[typeddict-item]
    return entity
