import json
import logging

from fastapi import APIRouter, Depends, Path, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from typing import Optional, Type, TypeVar

import config
from errors import StorageFault, TaskNotFound, ValidationError
from schemas import TaskCreate, TaskUpdate, TaskResponse, TaskForm, ApiResponse
from store import TaskStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Largest id a SQLite INTEGER column can hold
MAX_TASK_ID = 2**63 - 1

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def get_store(request: Request) -> TaskStore:
    """Task store opened at startup - used as FastAPI dependency"""
    return request.app.state.store


async def read_task_body(request: Request) -> dict:
    """
    Request body as a dict, from either a JSON object or an HTML form

    An empty body yields an empty dict so schema validation reports the
    missing fields.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return dict(form.items())

    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise RequestValidationError(
            [{"loc": ("body",), "msg": "Body is not valid JSON", "type": "json_invalid"}]
        )
    if not isinstance(data, dict):
        raise RequestValidationError(
            [{"loc": ("body",), "msg": "Body must be a JSON object", "type": "dict_type"}]
        )
    return data


def parse_body(schema: Type[SchemaT], data: dict) -> SchemaT:
    try:
        return schema.model_validate(data)
    except SchemaError as exc:
        raise RequestValidationError(exc.errors())


def redirect_to_list(request: Request) -> RedirectResponse:
    return RedirectResponse(
        url=str(request.url_for("list_tasks")),
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("")
def list_tasks(store: TaskStore = Depends(get_store)) -> ApiResponse:
    """
    Get all tasks, newest first

    Returns:
        ApiResponse with list of tasks
    """
    tasks = store.list_all()

    return ApiResponse(
        success=True,
        data=[TaskResponse.model_validate(task).model_dump() for task in tasks]
    )


@router.get("/new")
def new_task_form() -> ApiResponse:
    """Context for an empty task form"""
    form = TaskForm(
        task={"title": "", "description": "", "status": config.default_status()},
        statuses=config.TASK_STATUSES,
    )
    return ApiResponse(success=True, data=form.model_dump())


@router.post("")
def create_task(
    request: Request,
    body: dict = Depends(read_task_body),
    store: TaskStore = Depends(get_store)
) -> RedirectResponse:
    """
    Create a new task

    Args:
        request: FastAPI request
        body: JSON or form fields title, description, status
        store: Task store

    Returns:
        Redirect to the task list
    """
    task_data = parse_body(TaskCreate, body)
    task_id = store.create(
        task_data.title,
        task_data.description,
        task_data.status or config.default_status(),
    )
    logger.info("Task %s created", task_id)
    return redirect_to_list(request)


@router.get("/{task_id}/edit")
def edit_task_form(
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID),
    store: TaskStore = Depends(get_store)
) -> ApiResponse:
    """Context for editing an existing task; storage failures read as not found"""
    try:
        task = store.get_by_id(task_id)
    except StorageFault:
        logger.exception("Error retrieving task %s for edit", task_id)
        raise TaskNotFound(task_id)

    form = TaskForm(
        task=TaskResponse.model_validate(task).model_dump(),
        statuses=config.TASK_STATUSES,
    )
    return ApiResponse(success=True, data=form.model_dump())


def _update(task_id: int, body: dict, request: Request, store: TaskStore) -> RedirectResponse:
    task_data = parse_body(TaskUpdate, body)
    changes = store.update(
        task_id,
        task_data.title,
        task_data.description,
        task_data.status or config.default_status(),
    )
    if not changes:
        logger.info("Update of task %s changed nothing", task_id)
    return redirect_to_list(request)


def _delete(task_id: int, request: Request, store: TaskStore) -> RedirectResponse:
    changes = store.delete(task_id)
    logger.info("Task %s deleted (rows=%s)", task_id, changes)
    return redirect_to_list(request)


@router.put("/{task_id}")
def update_task(
    request: Request,
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID),
    body: dict = Depends(read_task_body),
    store: TaskStore = Depends(get_store)
) -> RedirectResponse:
    """
    Update a task

    Redirects to the list whether or not the task existed.

    Args:
        request: FastAPI request
        task_id: Task ID
        body: JSON or form fields title, description, status
        store: Task store

    Returns:
        Redirect to the task list
    """
    return _update(task_id, body, request, store)


@router.delete("/{task_id}")
def delete_task(
    request: Request,
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID),
    store: TaskStore = Depends(get_store)
) -> RedirectResponse:
    """Delete a task; deleting an absent task is not an error"""
    return _delete(task_id, request, store)


@router.post("/{task_id}")
def override_task_method(
    request: Request,
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID),
    method: Optional[str] = Query(None, alias="_method"),
    body: dict = Depends(read_task_body),
    store: TaskStore = Depends(get_store)
) -> RedirectResponse:
    """
    PUT/DELETE for clients that can only send POST (plain HTML forms)

    The verb comes from the ``_method`` query parameter or form field.

    Args:
        request: FastAPI request
        task_id: Task ID
        method: Verb to dispatch
        body: JSON or form fields; title is required for PUT
        store: Task store

    Returns:
        Redirect to the task list
    """
    body_method = body.pop("_method", None)
    method = (method or body_method or "").upper()
    if method == "PUT":
        return _update(task_id, body, request, store)
    if method == "DELETE":
        return _delete(task_id, request, store)
    raise ValidationError(f"Unsupported _method: {method or '(missing)'}")


@router.get("/{task_id}")
def show_task(
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID),
    store: TaskStore = Depends(get_store)
) -> ApiResponse:
    """
    Get task details

    A storage failure here is reported as not found.

    Args:
        task_id: Task ID
        store: Task store

    Returns:
        ApiResponse with task details
    """
    try:
        task = store.get_by_id(task_id)
    except StorageFault:
        logger.exception("Error retrieving task %s", task_id)
        raise TaskNotFound(task_id)

    return ApiResponse(
        success=True,
        data=TaskResponse.model_validate(task).model_dump()
    )
