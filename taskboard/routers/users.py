"""API router for users."""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from taskboard.database import get_db
from taskboard.errors import NotFoundError, TaskboardError, ValidationError
from taskboard.routers.params import list_params
from taskboard.schemas.envelope import Envelope
from taskboard.schemas.user import UserCreate, UserResponse, UserUpdate
from taskboard.services.query_builder import build_list_query, parse_strict_projection
from taskboard.services.user_service import UserService

router = APIRouter()
logger = logging.getLogger("taskboard.users")


@router.get("", response_model=Envelope)
def list_users(
    params: dict[str, str | None] = Depends(list_params),
    db: Session = Depends(get_db),
) -> Envelope:
    """List users. Same parameters as the task list, without a default limit."""
    try:
        query = build_list_query(params)
        result = UserService.list_users(db, query)
    except TaskboardError as exc:
        logger.warning("HTTP list users failed: %s", exc.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching users",
        ) from exc

    if isinstance(result, int):
        return Envelope(message="OK", data=result)
    documents = [UserResponse.document(user) for user in result]
    if query.projection is not None:
        documents = [query.projection.apply(document) for document in documents]
    return Envelope(message="OK", data=documents)


@router.post("", response_model=Envelope, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate | None = Body(None),
    db: Session = Depends(get_db),
) -> Envelope:
    """Create a new user."""
    try:
        created = UserService.create_user(db, user or UserCreate())
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except TaskboardError as exc:
        logger.warning("HTTP create user failed: %s", exc.message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to create user",
        ) from exc
    logger.info("HTTP create: user_id=%s", created.id)
    return Envelope(message="User created", data=UserResponse.document(created))


@router.get("/{user_id}", response_model=Envelope)
def get_user(
    user_id: str,
    select: str | None = Query(None, description="JSON projection; must be valid JSON"),
    db: Session = Depends(get_db),
) -> Envelope:
    """Get a single user."""
    try:
        projection = parse_strict_projection(select)
        user = UserService.get_user(db, user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except TaskboardError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Error fetching user",
        ) from exc

    document = UserResponse.document(user)
    if projection is not None:
        document = projection.apply(document)
    return Envelope(message="OK", data=document)


@router.put("/{user_id}", response_model=Envelope)
def replace_user(
    user_id: str,
    user_update: UserUpdate | None = Body(None),
    db: Session = Depends(get_db),
) -> Envelope:
    """Replace a user and re-point the tasks listed in `pendingTasks`."""
    try:
        updated = UserService.replace_user(db, user_id, user_update or UserUpdate())
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except TaskboardError as exc:
        logger.warning("HTTP replace user failed: user_id=%s %s", user_id, exc.message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to update user",
        ) from exc
    logger.info("HTTP update: user_id=%s", user_id)
    return Envelope(message="User updated", data=UserResponse.document(updated))


@router.delete("/{user_id}", response_model=Envelope)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
) -> Envelope:
    """Delete a user, unassigning its tasks."""
    try:
        UserService.delete_user(db, user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except TaskboardError as exc:
        logger.warning("HTTP delete user failed: user_id=%s %s", user_id, exc.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete user",
        ) from exc
    logger.info("HTTP delete: user_id=%s", user_id)
    return Envelope(message="User deleted", data={})
