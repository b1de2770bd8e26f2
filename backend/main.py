from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool

from handlers import build_router
from log import get_logger, setup_logging
from repo_events import EventRepo
from settings import settings
from storage import AnalyticsStorage, MemoryStorage

logger = get_logger(__name__)


def make_storage(backend: str) -> AnalyticsStorage:
    if backend == "postgres":
        return EventRepo()
    if backend == "memory":
        return MemoryStorage()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")


def create_app(storage: AnalyticsStorage | None = None) -> FastAPI:
    """Build the API. Tests pass their own `storage`; otherwise it comes
    from `settings.storage_backend`."""

    setup_logging(settings.log_level)
    if storage is None:
        storage = make_storage(settings.storage_backend)
    logger.info("starting with %s storage", type(storage).__name__)

    app = FastAPI(title="Event Metrics Backend")
    app.include_router(build_router(storage))

    @app.get("/health")
    async def health():
        ping = getattr(storage, "ping", None)
        try:
            if ping is not None:
                await run_in_threadpool(ping)
        except Exception:
            logger.exception("storage health check failed")
            raise HTTPException(status_code=500, detail="Storage health check failed")
        return {"ok": True}

    return app


app = create_app()
