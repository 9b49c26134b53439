"""
Project CRUD routes
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from projecthub.api.dependencies import get_storage
from projecthub.api.exceptions import (
    ProjectNotFoundError,
    ProjectValidationError,
    StorageFailureError,
)
from projecthub.api.schemas.project import Project, ProjectCreate, ProjectUpdate
from projecthub.api.services.storage import (
    ProjectStorage,
    ScheduleConflictError,
    SimulatedNetworkError,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def storage_failure(action: str, detail: str, exc: Exception) -> StorageFailureError:
    if isinstance(exc, SimulatedNetworkError):
        logger.warning(f"Error {action}: {exc}")
    else:
        logger.exception(f"Error {action}: {exc}")
    return StorageFailureError(detail=detail)


@router.get("", response_model=List[Project], summary="List all projects")
async def list_projects(storage: ProjectStorage = Depends(get_storage)):
    try:
        return await storage.list()
    except Exception as e:
        raise storage_failure("getting projects", "Failed to retrieve projects", e)


# Registered before /{project_id} so "favorites" is never parsed as an id
@router.get("/favorites", response_model=List[Project], summary="List favorite projects")
async def list_favorite_projects(storage: ProjectStorage = Depends(get_storage)):
    try:
        return await storage.list_favorites()
    except Exception as e:
        raise storage_failure("getting favorite projects", "Failed to retrieve favorite projects", e)


@router.get("/{project_id}", response_model=Project, summary="Get a project")
async def get_project(project_id: int, storage: ProjectStorage = Depends(get_storage)):
    try:
        project = await storage.get(project_id)
    except Exception as e:
        raise storage_failure("getting project", "Failed to retrieve project", e)

    if project is None:
        raise ProjectNotFoundError()
    return project


@router.post(
    "",
    response_model=Project,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(data: ProjectCreate, storage: ProjectStorage = Depends(get_storage)):
    try:
        return await storage.create(data)
    except Exception as e:
        raise storage_failure("creating project", "Failed to create project", e)


@router.patch("/{project_id}", response_model=Project, summary="Partially update a project")
async def update_project(
    project_id: int, update: ProjectUpdate, storage: ProjectStorage = Depends(get_storage)
):
    """
    Apply only the fields present in the body.

    The schedule rule is checked by storage against the merged record, so a
    single startDate or endDate is compared with the stored value of the other.
    """
    try:
        project = await storage.update(project_id, update.changes())
    except ScheduleConflictError as e:
        raise ProjectValidationError(detail=f"Validation error: {e}")
    except Exception as e:
        raise storage_failure("updating project", "Failed to update project", e)

    if project is None:
        raise ProjectNotFoundError()
    return project


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a project",
)
async def delete_project(project_id: int, storage: ProjectStorage = Depends(get_storage)):
    try:
        deleted = await storage.delete(project_id)
    except Exception as e:
        raise storage_failure("deleting project", "Failed to delete project", e)

    if not deleted:
        raise ProjectNotFoundError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{project_id}/toggle-favorite", response_model=Project, summary="Toggle favorite status"
)
async def toggle_favorite(project_id: int, storage: ProjectStorage = Depends(get_storage)):
    try:
        project = await storage.toggle_favorite(project_id)
    except Exception as e:
        raise storage_failure("toggling favorite", "Failed to update favorite status", e)

    if project is None:
        raise ProjectNotFoundError()
    return project
