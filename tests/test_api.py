"""End-to-end tests through the HTTP surface (FastAPI TestClient)."""
import asyncio
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.database import get_db, init_models
from app.core.security import get_password_hash
from app.main import app
from app.models.user import User, UserRoleEnum

PASSWORD = "secret123"


@pytest.fixture
def api(tmp_path):
    """TestClient wired to a throwaway SQLite file; lifespan is not started."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    asyncio.run(init_models(bind=test_engine))
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app), session_factory
    app.dependency_overrides.clear()
    asyncio.run(test_engine.dispose())


def login(client, email, password=PASSWORD):
    resp = client.post("/auth/token", data={"username": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def register(client, email, role):
    resp = client.post("/auth/register", json={
        "email": email, "password": PASSWORD, "full_name": email.split("@")[0], "role": role
    })
    assert resp.status_code == 201, resp.text
    return login(client, email)


def create_admin(session_factory, email="ops@example.com"):
    async def _create():
        async with session_factory() as session:
            session.add(User(
                email=email,
                password_hash=get_password_hash(PASSWORD),
                full_name="Ops",
                role=UserRoleEnum.admin
            ))
            await session.commit()
    asyncio.run(_create())


def hire(client, client_h, freelancer_h, budget="500.00", price="450.00"):
    project = client.post("/projects/", json={"title": "Holiday promo banners", "budget": budget}, headers=client_h)
    assert project.status_code == 201, project.text
    project_id = project.json()["project_id"]

    proposal = client.post(
        f"/projects/{project_id}/proposals",
        json={"price": price, "delivery_days": 7, "message": "Ready to start"},
        headers=freelancer_h
    )
    assert proposal.status_code == 201, proposal.text

    contract = client.post(f"/proposals/{proposal.json()['proposal_id']}/accept", headers=client_h)
    assert contract.status_code == 201, contract.text
    return project_id, contract.json()


def deliver_and_settle(client, client_h, freelancer_h, contract_id):
    assert client.post(f"/contracts/{contract_id}/submit", json={"note": "Final files"}, headers=freelancer_h).status_code == 200
    assert client.post(f"/contracts/{contract_id}/approve", headers=client_h).status_code == 200
    resp = client.post(f"/contracts/{contract_id}/release-payment", headers=client_h)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_root(api):
    client, _ = api
    assert client.get("/").json()["status"] == "success"


def test_full_hire_to_payout(api):
    client, _ = api
    client_h = register(client, "brand@example.com", "client")
    freelancer_h = register(client, "designer@example.com", "designer")

    project_id, contract = hire(client, client_h, freelancer_h)
    assert Decimal(contract["amount"]) == Decimal("450")
    assert Decimal(contract["platform_fee"]) == Decimal("45")
    assert contract["status"] == "in_progress"
    assert client.get(f"/projects/{project_id}", headers=client_h).json()["status"] == "in_progress"

    cid = contract["contract_id"]
    submitted = client.post(f"/contracts/{cid}/submit", headers=freelancer_h)
    assert submitted.json()["status"] == "submitted"

    detail = client.get(f"/contracts/{cid}", headers=client_h).json()
    assert set(detail["allowed_actions"]) == {"request_revision", "approve_work", "cancel"}

    approved = client.post(f"/contracts/{cid}/approve", headers=client_h).json()
    assert approved["status"] == "approved"
    assert approved["approved_at"] is not None

    settlement = client.post(f"/contracts/{cid}/release-payment", headers=client_h)
    assert settlement.status_code == 200, settlement.text
    body = settlement.json()
    assert body["contract"]["status"] == "completed"
    assert Decimal(body["freelancer_net"]) == Decimal("405")
    assert Decimal(body["wallet"]["balance"]) == Decimal("405")
    assert client.get(f"/projects/{project_id}", headers=client_h).json()["status"] == "completed"

    wallet = client.get("/wallet/me", headers=freelancer_h).json()
    assert Decimal(wallet["balance"]) == Decimal("405")
    assert Decimal(wallet["total_earned"]) == Decimal("405")

    # releasing twice is refused and pays nothing more
    again = client.post(f"/contracts/{cid}/release-payment", headers=client_h)
    assert again.status_code == 409
    assert again.json()["code"] == "conflict"
    assert Decimal(client.get("/wallet/me", headers=freelancer_h).json()["balance"]) == Decimal("405")


def test_overdraw_withdrawal_is_refused(api):
    client, _ = api
    client_h = register(client, "shop@example.com", "client")
    freelancer_h = register(client, "buyer@example.com", "media_buyer")
    _, contract = hire(client, client_h, freelancer_h, price="111.11")
    deliver_and_settle(client, client_h, freelancer_h, contract["contract_id"])
    assert Decimal(client.get("/wallet/me", headers=freelancer_h).json()["balance"]) == Decimal("100")

    resp = client.post("/wallet/withdrawals", json={"amount": "150.00"}, headers=freelancer_h)
    assert resp.status_code == 400
    assert resp.json()["code"] == "insufficient_balance"

    assert client.get("/wallet/withdrawals", headers=freelancer_h).json() == []
    assert Decimal(client.get("/wallet/me", headers=freelancer_h).json()["balance"]) == Decimal("100")


def test_admin_approves_withdrawal(api):
    client, session_factory = api
    create_admin(session_factory)
    admin_h = login(client, "ops@example.com")
    client_h = register(client, "agency@example.com", "client")
    freelancer_h = register(client, "artist@example.com", "designer")
    _, contract = hire(client, client_h, freelancer_h, price="111.11")
    deliver_and_settle(client, client_h, freelancer_h, contract["contract_id"])

    withdrawal = client.post("/wallet/withdrawals", json={"amount": "40.00"}, headers=freelancer_h).json()
    assert withdrawal["status"] == "pending"

    # freelancers cannot reach the admin surface
    assert client.post(f"/admin/withdrawals/{withdrawal['withdrawal_id']}/approve", headers=freelancer_h).status_code == 403

    queue = client.get("/admin/withdrawals", params={"status": "pending"}, headers=admin_h).json()
    assert [w["withdrawal_id"] for w in queue] == [withdrawal["withdrawal_id"]]

    approved = client.post(f"/admin/withdrawals/{withdrawal['withdrawal_id']}/approve", headers=admin_h)
    assert approved.status_code == 200, approved.text
    assert approved.json()["status"] == "approved"
    assert Decimal(client.get("/wallet/me", headers=freelancer_h).json()["balance"]) == Decimal("60")

    logs = client.get("/admin/logs", headers=admin_h).json()
    assert logs[0]["action"] == "withdrawal_approved"


def test_errors_carry_codes(api):
    client, _ = api
    client_h = register(client, "owner@example.com", "client")
    freelancer_h = register(client, "maker@example.com", "designer")

    assert client.get("/contracts/my").status_code == 401

    missing = client.get("/contracts/00000000-0000-0000-0000-000000000000", headers=client_h)
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"

    _, contract = hire(client, client_h, freelancer_h)
    wrong_party = client.post(f"/contracts/{contract['contract_id']}/submit", headers=client_h)
    assert wrong_party.status_code == 403
    assert wrong_party.json()["code"] == "unauthorized"

    too_early = client.post(f"/contracts/{contract['contract_id']}/release-payment", headers=client_h)
    assert too_early.status_code == 409
    assert too_early.json()["code"] == "invalid_transition"


def test_admin_self_registration_is_refused(api):
    client, _ = api
    resp = client.post("/auth/register", json={
        "email": "sneaky@example.com", "password": PASSWORD, "role": "admin"
    })
    assert resp.status_code == 422


def test_messages_and_notifications(api):
    client, _ = api
    client_h = register(client, "studio@example.com", "client")
    freelancer_h = register(client, "illustrator@example.com", "designer")
    _, contract = hire(client, client_h, freelancer_h)
    cid = contract["contract_id"]

    posted = client.post(f"/contracts/{cid}/messages", json={"content": "Any questions?"}, headers=client_h)
    assert posted.status_code == 201, posted.text

    thread = client.get(f"/contracts/{cid}/messages", headers=freelancer_h).json()
    assert [m["content"] for m in thread] == ["Any questions?"]

    notices = client.get("/notifications/my", headers=freelancer_h).json()
    message_notice = next(n for n in notices if n["type"] == "message_received")
    read = client.patch(f"/notifications/{message_notice['notification_id']}/read", headers=freelancer_h)
    assert read.json()["is_read"] is True
