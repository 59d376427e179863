"""Per-request context used to correlate log lines, errors and responses."""

from __future__ import annotations

import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, Optional

import structlog


@dataclass(frozen=True)
class RequestContext:
    """Created at dispatch entry, discarded once the response is built."""

    request_id: str
    method: str
    received_at: datetime
    started: float = field(default_factory=time.perf_counter, compare=False, repr=False)

    @classmethod
    def new(cls, method: str, request_id: Optional[str] = None) -> "RequestContext":
        return cls(
            request_id=request_id or str(uuid.uuid4()),
            method=method,
            received_at=datetime.now(timezone.utc),
        )

    @property
    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.started) * 1000, 1)


@contextmanager
def bound_context(ctx: RequestContext, **extra: str) -> Iterator[RequestContext]:
    """Bind the request id (and extras) to every log line emitted inside the block.

    Each asyncio task has its own contextvars copy, so concurrent dispatches
    never see each other's bindings.
    """

    tokens = structlog.contextvars.bind_contextvars(
        request_id=ctx.request_id, method=ctx.method, **extra
    )
    try:
        yield ctx
    finally:
        structlog.contextvars.reset_contextvars(**tokens)
