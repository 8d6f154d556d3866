"""Health check endpoint."""

import logging

import redis.asyncio as aioredis
from fastapi import APIRouter
from sqlalchemy import text

from donation_hub.core.config import VERSION, settings
from donation_hub.db.session import engine

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_db() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Health: database unreachable: %s", exc)
        return "error"
    return "ok"


async def _check_redis() -> str:
    # Only the redis rate-limit backend depends on it
    if settings.RATE_LIMIT_BACKEND != "redis":
        return "skipped"
    try:
        r = aioredis.from_url(settings.REDIS_URL)
        await r.ping()
        await r.aclose()
    except Exception as exc:
        logger.warning("Health: redis unreachable: %s", exc)
        return "error"
    return "ok"


@router.get("/health")
async def health_check():
    """Check DB and (when used) Redis connectivity."""
    db_status = await _check_db()
    redis_status = await _check_redis()
    status = "ok" if db_status == "ok" and redis_status != "error" else "degraded"
    return {
        "status": status,
        "db": db_status,
        "redis": redis_status,
        "version": VERSION,
    }
