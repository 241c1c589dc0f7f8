import contextlib
import contextvars
import logging
import uuid
from collections.abc import Iterator

CONTEXT_FIELDS = ("request_id", "trip_id", "client_ip")

_request_context: contextvars.ContextVar[dict | None] = contextvars.ContextVar("request_context", default=None)


def current_request_context() -> dict:
    return dict(_request_context.get() or {})


@contextlib.contextmanager
def request_context(**values: str) -> Iterator[dict]:
    """Bind log context for the duration of the block, nesting over any outer context."""
    merged = current_request_context()
    merged.update({key: value for key, value in values.items() if value})
    token = _request_context.set(merged)
    try:
        yield merged
    finally:
        _request_context.reset(token)


def new_request_id() -> str:
    return uuid.uuid4().hex


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        context = _request_context.get() or {}
        for field in CONTEXT_FIELDS:
            setattr(record, field, context.get(field, "-"))
        return True
