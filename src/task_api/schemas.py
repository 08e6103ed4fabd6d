from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from .models import TASK_PRIORITIES, TASK_STATUSES

# Shared type for incoming due dates which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Internal helper to normalize due date input into a datetime.
    - If value is a string, attempt to parse via datetime.fromisoformat; if time is missing, set to 00:00.
    - If value is a date (not datetime), convert to datetime at 00:00.
    - If value is a datetime, return as-is.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            return datetime.fromisoformat(s)
        except ValueError:
            try:
                d = date.fromisoformat(s)
                return datetime(d.year, d.month, d.day, 0, 0, 0)
            except ValueError as e:
                raise ValueError(
                    "Invalid dueDate format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
                ) from e

    raise ValueError("Invalid type for dueDate; expected date, datetime, or ISO8601 string.")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class TaskIn(_CamelModel):
    """
    Request body for creating or updating a task.

    id and the audit fields are not part of this schema; if a client sends
    them they are dropped.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Write spec",
                "description": "First draft of the task tracker design",
                "status": "Open",
                "priority": "High",
                "dueDate": "2025-02-01",
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title; required when the task is stored")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    status: Optional[str] = Field(default=None, description=f"One of: {', '.join(TASK_STATUSES)}; defaults to Open")
    priority: Optional[str] = Field(default=None, description=f"One of: {', '.join(TASK_PRIORITIES)}; defaults to Medium")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return _parse_due_date(v)


# PUBLIC_INTERFACE
class TaskOut(_CamelModel):
    """
    Task as returned by the API. Timestamps are rendered without fractional seconds.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Write spec",
                "description": "First draft of the task tracker design",
                "status": "Open",
                "priority": "Medium",
                "dueDate": "2025-02-01T00:00:00",
                "createdBy": "SYSTEM",
                "createdOn": "2025-01-25T10:15:30",
                "modifiedBy": "SYSTEM",
                "modifiedOn": "2025-01-25T10:15:30",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    status: str = Field(..., description="Workflow status")
    priority: Optional[str] = Field(default=None, description="Priority")
    due_date: Optional[datetime] = Field(default=None, description="Due date/time")
    created_by: Optional[str] = Field(default=None, description="User that created the task")
    created_on: datetime = Field(..., description="Creation timestamp")
    modified_by: Optional[str] = Field(default=None, description="User that last modified the task")
    modified_on: datetime = Field(..., description="Last modification timestamp")

    @field_serializer("due_date", "created_on", "modified_on")
    def serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return value.strftime(TIMESTAMP_FORMAT) if value is not None else None


# PUBLIC_INTERFACE
class TaskPageOut(_CamelModel):
    """
    Envelope for paginated task lists.
    """

    content: List[TaskOut] = Field(..., description="Tasks on this page")
    page: int = Field(..., description="Zero-based page number")
    size: int = Field(..., description="Requested page size")
    total_elements: int = Field(..., description="Total number of tasks matching the query")
    total_pages: int = Field(..., description="Total number of pages at this size")
    first: bool = Field(..., description="Whether this is the first page")
    last: bool = Field(..., description="Whether this is the last page")
