import logging

from fastapi import FastAPI

from api.v1.api_router import api_router
from core.config import settings
from core.database import engine, init_models
from core.locks import SellerLocks
from services.verification_provider import build_provider

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.APP_NAME,
    description="Vendor verification and trust scoring",
    version="1.0.0"
)

app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """Create tables, lock registries and the verification provider"""
    if settings.AUTO_CREATE_TABLES:
        await init_models()

    # one registry per workflow structure, shared by every request
    app.state.ledger_locks = SellerLocks("ledger")
    app.state.submission_locks = SellerLocks("submission")
    app.state.verification_provider = await build_provider(
        settings.VERIFICATION_PROVIDER, settings.VERIFICATION_PROVIDER_CONFIG
    )
    logger.info(f"{settings.APP_NAME} started with provider '{settings.VERIFICATION_PROVIDER}'")


@app.on_event("shutdown")
async def shutdown_event():
    await engine.dispose()
    logger.info(f"{settings.APP_NAME} stopped")


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "1.0.0"
    }
