# app/services/project_service.py
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, InvalidTransitionError, NotFoundError, UnauthorizedError
from app.models.user import User, UserRoleEnum
from app.models.project import Project, ProjectStatusEnum
from app.repositories.project_repo import ProjectRepository
from app.repositories.proposal_repo import ProposalRepository
from app.schemas.project_schema import ProjectCreate

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.project_repo = ProjectRepository(db)
        self.proposal_repo = ProposalRepository(db)

    async def _get_owned_project(self, project_id: str, user: User) -> Project:
        project = await self.project_repo.get_project_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        if project.client_id != user.user_id:
            raise UnauthorizedError("You do not own this project")
        return project

    async def create_project(self, client: User, data: ProjectCreate) -> Project:
        if client.role != UserRoleEnum.client:
            raise UnauthorizedError("Only clients can post projects")

        project = Project(
            client_id=client.user_id,
            title=data.title,
            description=data.description,
            service_type=data.service_type,
            required_skills=data.required_skills,
            budget=data.budget,
            deadline=data.deadline,
            status=ProjectStatusEnum.draft if data.as_draft else ProjectStatusEnum.open
        )
        project = await self.project_repo.create_project(project)
        await self.db.commit()
        logger.info(f"Project {project.project_id} created by client {client.user_id} ({project.status.value})")
        return project

    async def get_project(self, project_id: str) -> Project:
        project = await self.project_repo.get_project_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    async def list_open_projects(self) -> List[Project]:
        return await self.project_repo.list_projects_by_status(ProjectStatusEnum.open)

    async def list_my_projects(self, client: User) -> List[Project]:
        return await self.project_repo.list_projects_by_client(client.user_id)

    async def publish_project(self, project_id: str, client: User) -> Project:
        """
        draft -> open
        """
        project = await self._get_owned_project(project_id, client)
        if project.status != ProjectStatusEnum.draft:
            raise InvalidTransitionError(f"Only draft projects can be published (status '{project.status.value}')")

        if not await self.project_repo.transition_status(
            project_id, [ProjectStatusEnum.draft], ProjectStatusEnum.open
        ):
            raise ConflictError("Project was modified concurrently")
        await self.db.commit()
        await self.db.refresh(project)
        logger.info(f"Project {project_id} published")
        return project

    async def cancel_project(self, project_id: str, client: User) -> Project:
        """
        draft | open -> cancelled; pending proposals on it are rejected.
        Projects with a running contract are cancelled through the contract.
        """
        project = await self._get_owned_project(project_id, client)
        cancellable = [ProjectStatusEnum.draft, ProjectStatusEnum.open]
        if project.status not in cancellable:
            raise InvalidTransitionError(f"Project in status '{project.status.value}' cannot be cancelled")

        try:
            if not await self.project_repo.transition_status(project_id, cancellable, ProjectStatusEnum.cancelled):
                raise ConflictError("Project was modified concurrently")
            rejected = await self.proposal_repo.reject_pending_for_project(project_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Cancelling project {project_id} failed", exc_info=True)
            raise

        await self.db.refresh(project)
        logger.info(f"Project {project_id} cancelled, {rejected} pending proposal(s) rejected")
        return project
