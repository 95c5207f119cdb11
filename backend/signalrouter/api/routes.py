"""FastAPI routes."""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool

from signalrouter.config import Settings
from signalrouter.domain.errors import (
    AuthenticityError,
    PayloadValidationError,
    StatusFetchError,
    UnknownSourceError,
)
from signalrouter.domain.models import BatchReport, EventRecord, IngestResult, Source
from signalrouter.services.ingestion import IngestionPipeline
from signalrouter.services.security import verify_stripe_signature
from signalrouter.storage.event_store import EventStore

log = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.pipeline


def get_store(request: Request) -> EventStore:
    return request.app.state.store


def _validation_detail(exc: PayloadValidationError) -> dict:
    return {"field": exc.field, "message": exc.message}


@router.post("/webhooks/stripe", response_model=IngestResult)
async def post_stripe_webhook(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
    pipeline: Annotated[IngestionPipeline, Depends(get_pipeline)],
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
):
    body = await request.body()
    if settings.stripe_webhook_secret:
        try:
            verify_stripe_signature(
                body,
                stripe_signature,
                settings.stripe_webhook_secret,
                tolerance_seconds=settings.stripe_signature_tolerance_seconds,
            )
        except AuthenticityError as exc:
            log.warning("rejected stripe webhook: %s", exc)
            raise HTTPException(status_code=400, detail=f"signature verification failed: {exc}") from exc

    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="body is not valid JSON") from exc

    try:
        return await run_in_threadpool(pipeline.ingest_payment_webhook, payload)
    except PayloadValidationError as exc:
        raise HTTPException(status_code=422, detail=_validation_detail(exc)) from exc


@router.post("/status/{source}/poll", response_model=BatchReport)
def poll_status_source(
    source: str,
    pipeline: Annotated[IngestionPipeline, Depends(get_pipeline)],
):
    try:
        status_source = Source(source)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=f"unknown source {source!r}") from exc

    try:
        return pipeline.poll_status_source(status_source)
    except UnknownSourceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PayloadValidationError as exc:
        raise HTTPException(status_code=422, detail=_validation_detail(exc)) from exc
    except StatusFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("/events", response_model=list[EventRecord])
def list_events(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[EventStore, Depends(get_store)],
    limit: Annotated[int | None, Query(ge=1)] = None,
):
    if limit is not None and limit > settings.max_query_limit:
        raise HTTPException(status_code=422, detail=f"limit must be <= {settings.max_query_limit}")
    return [EventRecord.from_stored(stored) for stored in store.query(limit)]


@router.get("/events/{event_id}", response_model=EventRecord)
def get_event(
    event_id: str,
    store: Annotated[EventStore, Depends(get_store)],
):
    stored = store.get(event_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="event not found")
    return EventRecord.from_stored(stored)
