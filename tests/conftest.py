import os
import sys
import uuid
from decimal import Decimal

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("PLATFORM_COMMISSION_RATE", "0.10")

# make the `app` package importable when running pytest from the repo root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.database import init_models
from app.models.user import User, UserRoleEnum
from app.schemas.project_schema import ProjectCreate
from app.schemas.proposal_schema import ProposalCreate
from app.services.contract_service import ContractService
from app.services.project_service import ProjectService
from app.services.proposal_service import ProposalService


def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite file per test; NullPool so no connection outlives its event loop."""
    engine = create_async_engine(sqlite_url(tmp_path), poolclass=NullPool)
    await init_models(bind=engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def other_db(engine):
    """A second, independent session: another request hitting the same database."""
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def run_after_first(monkeypatch):
    """
    Patch an async repository read so that `competitor` runs once, right
    after the first call returns. The caller then carries on with a row
    that is already stale.
    """
    def _install(cls, method_name, competitor):
        original = getattr(cls, method_name)
        fired = []

        async def wrapper(self, *args, **kwargs):
            row = await original(self, *args, **kwargs)
            if not fired:
                fired.append(True)
                await competitor()
            return row

        monkeypatch.setattr(cls, method_name, wrapper)

    return _install


@pytest.fixture
def make_user(db):
    async def _make(role: UserRoleEnum = UserRoleEnum.client, full_name: str = "") -> User:
        user = User(
            email=f"{role.value}-{uuid.uuid4().hex[:8]}@example.com",
            password_hash="unused",
            full_name=full_name or role.value.replace("_", " ").title(),
            role=role,
        )
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_contract(db, make_user):
    """
    client posts a project, a designer bids, the client accepts.
    Returns (client, freelancer, contract) with the contract in_progress.
    """
    async def _make(budget: str = "500.00", price: str = "450.00", delivery_days: int = 7):
        client = await make_user(UserRoleEnum.client)
        freelancer = await make_user(UserRoleEnum.designer)
        project = await ProjectService(db).create_project(
            client, ProjectCreate(title="Spring campaign creatives", budget=Decimal(budget))
        )
        proposal = await ProposalService(db).submit_proposal(
            project.project_id,
            freelancer,
            ProposalCreate(price=Decimal(price), delivery_days=delivery_days, message="Can start today")
        )
        contract = await ProposalService(db).accept_proposal(proposal.proposal_id, client)
        return client, freelancer, contract

    return _make


@pytest.fixture
def make_approved_contract(db, make_contract):
    async def _make(**kwargs):
        client, freelancer, contract = await make_contract(**kwargs)
        service = ContractService(db)
        await service.submit_work(contract.contract_id, freelancer, "Final files attached")
        contract = await service.approve_work(contract.contract_id, client)
        return client, freelancer, contract

    return _make
