import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import init_models
from app.core.exceptions import MarketplaceError
from app.routers import (
    auth_router, user_router,
    project_router, contract_router,
    wallet_router, notification_router, admin_router
)

# proposal_router.py carries two routers: /proposals and /projects/{id}/proposals
from app.routers.proposal_router import (
    router as proposal_main_router,
    project_proposal_router as proposal_project_router
)


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info(f"Tables ready, platform commission rate {settings.PLATFORM_COMMISSION_RATE}")
    yield


app = FastAPI(title="AdFlow Marketplace", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    """Same body as any HTTPException, plus a machine readable `code`."""
    if exc.status_code >= 500:
        return await http_exception_handler(request, exc)
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=exc.headers,
    )


@app.get("/")
def read_root():
    return {"status": "success", "message": "Backend is running!"}


app.include_router(auth_router.router)
app.include_router(user_router.router)
app.include_router(project_router.router)
app.include_router(proposal_main_router)
app.include_router(proposal_project_router)
app.include_router(contract_router.router)
app.include_router(wallet_router.router)
app.include_router(notification_router.router)
app.include_router(admin_router.router)
