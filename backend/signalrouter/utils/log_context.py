"""Logging setup and request-id propagation."""

import logging
from contextvars import ContextVar
from uuid import uuid4

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[str] = ContextVar("request_id", default="-")
_base_factory = logging.getLogRecordFactory()


def _record_factory(*args, **kwargs):
    record = _base_factory(*args, **kwargs)
    record.request_id = _request_id.get()
    return record


def configure_logging(level: str = "INFO") -> None:
    logging.setLogRecordFactory(_record_factory)
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s req=%(request_id)s %(name)s - %(message)s",
    )


def new_request_id() -> str:
    return uuid4().hex


def bind_request_id(request_id: str):
    """Set the request id for the current context; returns the reset token."""

    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)