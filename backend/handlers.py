"""
HTTP handlers for event ingestion and metrics reporting.

The handlers are mounted for every method so they can answer 405
themselves; they are attachable at any path. Blocking storage work runs
in the threadpool so concurrent requests are never serialized here.

Status mapping:
- wrong method -> 405
- unparsable body / missing fields / bad date -> 400
- any storage failure -> 500 with a fixed message
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from log import get_logger
from models import EventIn
from service_events import EventService, InvalidDateError, InvalidEventError
from storage import AnalyticsStorage, StorageError

logger = get_logger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _method_not_allowed(allowed: str) -> HTTPException:
    return HTTPException(status_code=405, detail="Method not allowed", headers={"Allow": allowed})


class EventIngestHandler:
    def __init__(self, storage: AnalyticsStorage):
        self.service = EventService(storage)

    async def handle(self, request: Request) -> JSONResponse:
        if request.method != "POST":
            raise _method_not_allowed("POST")

        body = await request.body()
        try:
            event_in = EventIn.model_validate_json(body)
        except ValidationError:
            logger.info("rejected event: unparsable body")
            raise HTTPException(status_code=400, detail="Invalid request body")

        try:
            event = await run_in_threadpool(self.service.track_event, event_in)
        except InvalidEventError as e:
            logger.info("rejected event: %s", e)
            raise HTTPException(status_code=400, detail=str(e))
        except StorageError as e:
            logger.exception("save_event failed")
            raise HTTPException(status_code=500, detail=str(e))

        logger.debug("stored %s event for %s", event.event_type, event.user_id)
        return JSONResponse({"status": "success"})


class MetricsQueryHandler:
    def __init__(self, storage: AnalyticsStorage):
        self.service = EventService(storage)

    async def handle(self, request: Request) -> JSONResponse:
        if request.method != "GET":
            raise _method_not_allowed("GET")

        q = request.query_params
        try:
            metrics = await run_in_threadpool(
                self.service.metrics_report,
                q.get("start", ""),
                q.get("end", ""),
                q.get("event_type", ""),
            )
        except InvalidDateError as e:
            logger.info("rejected metrics query: %s", e)
            raise HTTPException(status_code=400, detail=str(e))
        except StorageError as e:
            logger.exception("get_metrics failed")
            raise HTTPException(status_code=500, detail=str(e))

        return JSONResponse([m.model_dump() for m in metrics])


def build_router(storage: AnalyticsStorage) -> APIRouter:
    """Mount both handlers on `/events` and `/metrics`."""

    router = APIRouter()
    router.add_api_route(
        "/events", EventIngestHandler(storage).handle, methods=ALL_METHODS, include_in_schema=False
    )
    router.add_api_route(
        "/metrics", MetricsQueryHandler(storage).handle, methods=ALL_METHODS, include_in_schema=False
    )
    return router
