from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..repositories import TaskStore, get_task_store
from ..schemas import TaskIn, TaskOut, TaskPageOut
from ..service import MAX_PAGE_SIZE, TaskService
from ..utils import page_envelope

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


def get_task_service(store: TaskStore = Depends(get_task_store)) -> TaskService:
    """
    Dependency returning a service bound to the configured store.
    """
    return TaskService(store)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TaskPageOut,
    summary="List Tasks",
    description=(
        "List tasks one page at a time, most recently modified first.\n\n"
        "Query parameters:\n"
        "- status: exact status to filter by; omitted, empty or 'All' lists every task\n"
        "- page: zero-based page number (default 0)\n"
        f"- size: page size (default 10, values above {MAX_PAGE_SIZE} are capped)"
    ),
    responses={
        200: {"description": "Page retrieved successfully"},
        422: {"description": "Invalid query parameters"},
    },
)
def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status", description="Status to filter by, or 'All'"),
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int = Query(10, ge=1, description="Maximum number of tasks per page"),
    service: TaskService = Depends(get_task_service),
) -> TaskPageOut:
    """
    List tasks with an optional status filter.
    """
    result = service.list_tasks(status_filter, page=page, size=size)
    envelope = page_envelope(result)
    envelope["content"] = [TaskOut.model_validate(t) for t in envelope["content"]]
    return TaskPageOut.model_validate(envelope)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description=(
        "Create a task. Missing status defaults to 'Open' and missing priority to 'Medium'. "
        "id and audit fields in the body are ignored."
    ),
    responses={
        201: {"description": "Task created successfully"},
        422: {"description": "Task could not be stored (e.g. missing title)"},
    },
)
def create_task(payload: TaskIn, service: TaskService = Depends(get_task_service)) -> TaskOut:
    """
    Create a new task.
    """
    return TaskOut.model_validate(service.create_task(payload))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description=(
        "Update a task. title, description and dueDate are replaced as sent (omitted means cleared); "
        "status and priority are only changed when present."
    ),
    responses={
        200: {"description": "Task updated"},
        404: {"description": "Task not found"},
    },
)
def update_task(task_id: int, payload: TaskIn, service: TaskService = Depends(get_task_service)) -> TaskOut:
    """
    Merge the payload into an existing task.
    """
    return TaskOut.model_validate(service.update_task(task_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete Task",
    description="Delete a task by ID. Deleting an unknown ID also succeeds.",
    responses={
        204: {"description": "Task deleted (or did not exist)"},
    },
)
def delete_task(task_id: int, service: TaskService = Depends(get_task_service)) -> Response:
    """
    Delete a task. Always returns 204.
    """
    service.delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
