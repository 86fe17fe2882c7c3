"""
Todo API — Task Route Handlers
================================

What:  The six /todos endpoints.
How:   Each handler takes the typed path id and/or validated body, delegates
       to TaskService and returns a pydantic response model.

Ids are declared as integers in the path pattern, so "/todos/view/abc" is
rejected with 400 by the validation handler before any query runs. A path
that exists under a different verb ("GET /todos/add") is answered 405 by the
router itself.

Bodies are decoded as JSON whatever their Content-Type, so `curl -d` (form
encoded) and `fetch` with a string body (text/plain) work the same as
application/json.
"""

from typing import Annotated, Any, Callable, Dict, List, Type, TypeVar

from fastapi import APIRouter, Depends, Path, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.database import get_db_session
from todo_api.exceptions import RequestError
from todo_api.schemas.task import (
    MessageResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from todo_api.services.task_service import task_service


MAX_TASK_ID = 2**63 - 1

TaskId = Annotated[
    int,
    Path(ge=1, le=MAX_TASK_ID, description="Task identifier assigned on creation"),
]

_errors = {
    400: {"description": "Malformed JSON body or task id"},
    404: {"description": "Task not found"},
    405: {"description": "Method not allowed"},
    500: {"description": "Storage error (driver message as plain text)"},
}

BodyModel = TypeVar("BodyModel", bound=BaseModel)


def json_body(model: Type[BodyModel]) -> Callable[[Request], Any]:
    """
    Dependency that decodes the raw request body into `model`.

    The Content-Type header is not consulted. Undecodable JSON, a non-object
    payload or wrongly typed fields raise RequestError (→ 400 Invalid JSON).
    """

    async def decode(request: Request) -> BodyModel:
        raw = await request.body()
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            raise RequestError(
                message="Invalid JSON",
                context={
                    "errors": e.error_count(),
                    "content_type": request.headers.get("content-type"),
                },
            ) from e

    return decode


def _json_request_body(model: Type[BaseModel]) -> Dict[str, Any]:
    """openapi_extra documenting the body that json_body() decodes."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/todos", tags=["Todos"])


@router.get(
    "",
    response_model=List[TaskResponse],
    responses={500: _errors[500]},
    summary="List all tasks",
)
async def list_tasks(db: AsyncSession = Depends(get_db_session)) -> List[TaskResponse]:
    return await task_service.list_tasks(db)


@router.post(
    "/add",
    response_model=TaskResponse,
    responses={code: _errors[code] for code in (400, 405, 500)},
    summary="Create a task",
    description="Creates a task from title and description. `id` and `done` in the body are ignored.",
    openapi_extra=_json_request_body(TaskCreate),
)
async def create_task(
    payload: TaskCreate = Depends(json_body(TaskCreate)),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.create_task(db, payload)


@router.get(
    "/view/{task_id}",
    response_model=TaskResponse,
    responses={code: _errors[code] for code in (400, 404, 405)},
    summary="View a task",
)
async def view_task(
    task_id: TaskId,
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.get_task(db, task_id)


@router.put(
    "/update/{task_id}",
    response_model=TaskResponse,
    responses=_errors,
    summary="Update a task's title and description",
    description="Rewrites title and/or description; `id` and `done` are preserved.",
    openapi_extra=_json_request_body(TaskUpdate),
)
async def update_task(
    task_id: TaskId,
    payload: TaskUpdate = Depends(json_body(TaskUpdate)),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.update_task(db, task_id, payload)


@router.patch(
    "/done/{task_id}",
    response_model=TaskResponse,
    responses=_errors,
    summary="Mark a task done",
)
async def mark_done(
    task_id: TaskId,
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.mark_done(db, task_id)


@router.delete(
    "/delete/{task_id}",
    response_model=MessageResponse,
    responses={code: _errors[code] for code in (400, 405, 500)},
    summary="Delete a task",
    description="Deleting an id that does not exist also answers 200.",
)
async def delete_task(
    task_id: TaskId,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await task_service.delete_task(db, task_id)
    return MessageResponse(message="Deleted")
