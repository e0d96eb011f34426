# app/routers/project_router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.core.security import get_current_user, require_roles
from app.models.user import User, UserRoleEnum

from app.services.project_service import ProjectService
from app.schemas.project_schema import ProjectCreate, ProjectOut

router = APIRouter(
    prefix="/projects",
    tags=["Projects"],
    # every route here needs a login
    dependencies=[Depends(get_current_user)]
)


def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


@router.post(
    "/",
    response_model=ProjectOut,
    status_code=status.HTTP_201_CREATED,
    summary="Post a project"
)
async def create_new_project(
    project_data: ProjectCreate,
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(require_roles(UserRoleEnum.client))
):
    """
    (client) Post a project. `as_draft=true` keeps it hidden until published.
    """
    return await service.create_project(current_user, project_data)


@router.get("/", response_model=List[ProjectOut], summary="Open projects")
async def list_open_projects(
    service: ProjectService = Depends(get_project_service)
):
    return await service.list_open_projects()


@router.get("/my", response_model=List[ProjectOut], summary="My posted projects")
async def list_my_projects(
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(get_current_user)
):
    return await service.list_my_projects(current_user)


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service)
):
    return await service.get_project(project_id)


@router.post("/{project_id}/publish", response_model=ProjectOut, summary="draft -> open")
async def publish_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(get_current_user)
):
    return await service.publish_project(project_id, current_user)


@router.post("/{project_id}/cancel", response_model=ProjectOut, summary="Cancel a project before hiring")
async def cancel_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(get_current_user)
):
    """
    (client) draft | open -> cancelled; pending proposals are rejected
    """
    return await service.cancel_project(project_id, current_user)
