"""FastAPI app entrypoint."""

import logging

from fastapi import FastAPI, Request

from signalrouter.adapters.statuspage import StatusPageFetcher
from signalrouter.api.routes import router
from signalrouter.config import Settings, get_settings
from signalrouter.services.ingestion import IngestionPipeline
from signalrouter.services.normalization import Normalizer
from signalrouter.services.notifier import build_destinations
from signalrouter.services.routing import RoutingEngine, routing_config_from
from signalrouter.storage.event_store import EventStore
from signalrouter.utils.log_context import (
    REQUEST_ID_HEADER,
    bind_request_id,
    configure_logging,
    new_request_id,
    reset_request_id,
)

log = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an app with its own store, router and pipeline."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    store = EventStore(default_limit=settings.default_query_limit)
    destinations = build_destinations(settings)
    pipeline = IngestionPipeline(
        normalizer=Normalizer(),
        store=store,
        router=RoutingEngine(store, destinations),
        config=routing_config_from(settings),
        fetcher=StatusPageFetcher(settings),
    )
    if not settings.stripe_webhook_secret:
        log.warning("STRIPE_WEBHOOK_SECRET is unset; webhook signatures will not be verified")
    log.info(
        "destinations=%s route_warnings=%s",
        [d.name for d in destinations],
        settings.route_warnings,
    )

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.store = store
    app.state.pipeline = pipeline

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        token = bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()
