# app/repositories/project_repo.py
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.models.project import Project, ProjectStatusEnum


class ProjectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_project(self, project: Project) -> Project:
        self.db.add(project)
        await self.db.flush()
        await self.db.refresh(project)
        return project

    async def get_project_by_id(self, project_id: str) -> Optional[Project]:
        stmt = select(Project).where(Project.project_id == project_id).execution_options(
            populate_existing=True
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_project_by_id_with_proposals(self, project_id: str) -> Optional[Project]:
        stmt = (
            select(Project)
            .where(Project.project_id == project_id)
            .options(selectinload(Project.proposals))
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_projects_by_status(self, status: ProjectStatusEnum) -> List[Project]:
        stmt = (
            select(Project)
            .where(Project.status == status)
            .order_by(Project.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_projects_by_client(self, client_id: str) -> List[Project]:
        stmt = (
            select(Project)
            .where(Project.client_id == client_id)
            .order_by(Project.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def transition_status(
        self,
        project_id: str,
        expected: List[ProjectStatusEnum],
        new_status: ProjectStatusEnum,
    ) -> bool:
        """
        Conditional status change: only applies while the project is still in
        one of `expected`. Returns False when another request got there first.
        """
        stmt = (
            update(Project)
            .where(Project.project_id == project_id, Project.status.in_(expected))
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
