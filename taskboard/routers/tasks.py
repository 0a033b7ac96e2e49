"""API router for tasks."""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from taskboard.config import get_settings
from taskboard.database import get_db
from taskboard.errors import NotFoundError, TaskboardError, ValidationError
from taskboard.routers.params import list_params
from taskboard.schemas.envelope import Envelope
from taskboard.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskboard.services.query_builder import build_list_query, parse_strict_projection
from taskboard.services.task_service import TaskService

router = APIRouter()
logger = logging.getLogger("taskboard.tasks")


@router.get("", response_model=Envelope)
def list_tasks(
    params: dict[str, str | None] = Depends(list_params),
    db: Session = Depends(get_db),
) -> Envelope:
    """List tasks.

    Supports `where`, `sort`, `select`, `skip`, `limit` (default 100) and
    `count=true`.
    """
    try:
        query = build_list_query(params, default_limit=get_settings().default_task_limit)
        result = TaskService.list_tasks(db, query)
    except TaskboardError as exc:
        logger.warning("HTTP list tasks failed: %s", exc.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching tasks",
        ) from exc

    if isinstance(result, int):
        return Envelope(message="OK", data=result)
    documents = [TaskResponse.document(task) for task in result]
    if query.projection is not None:
        documents = [query.projection.apply(document) for document in documents]
    return Envelope(message="OK", data=documents)


@router.post("", response_model=Envelope, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate | None = Body(None),
    db: Session = Depends(get_db),
) -> Envelope:
    """Create a task; `assignedUser` is linked when it names an existing user."""
    try:
        created = TaskService.create_task(db, task or TaskCreate())
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except TaskboardError as exc:
        logger.warning("HTTP create task failed: %s", exc.message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to create task",
        ) from exc
    logger.info("HTTP create: task_id=%s", created.id)
    return Envelope(message="Task created", data=TaskResponse.document(created))


@router.get("/{task_id}", response_model=Envelope)
def get_task(
    task_id: str,
    select: str | None = Query(None, description="JSON projection; must be valid JSON"),
    db: Session = Depends(get_db),
) -> Envelope:
    """Get one task."""
    try:
        projection = parse_strict_projection(select)
        task = TaskService.get_task(db, task_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except TaskboardError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Error fetching task",
        ) from exc

    document = TaskResponse.document(task)
    if projection is not None:
        document = projection.apply(document)
    return Envelope(message="OK", data=document)


@router.put("/{task_id}", response_model=Envelope)
def replace_task(
    task_id: str,
    task_update: TaskUpdate | None = Body(None),
    db: Session = Depends(get_db),
) -> Envelope:
    """Replace a task."""
    try:
        updated = TaskService.replace_task(db, task_id, task_update or TaskUpdate())
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except TaskboardError as exc:
        logger.warning("HTTP replace task failed: task_id=%s %s", task_id, exc.message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to update task",
        ) from exc
    logger.info("HTTP update: task_id=%s", task_id)
    return Envelope(message="Task updated", data=TaskResponse.document(updated))


@router.delete("/{task_id}", response_model=Envelope)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
) -> Envelope:
    """Delete a task."""
    try:
        TaskService.delete_task(db, task_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except TaskboardError as exc:
        logger.warning("HTTP delete task failed: task_id=%s %s", task_id, exc.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete task",
        ) from exc
    logger.info("HTTP delete: task_id=%s", task_id)
    return Envelope(message="Task deleted", data={})
