import asyncio

import pytest
import structlog

from wallet_mcp.core.context import RequestContext, bound_context


def test_new_context_generates_unique_ids():
    first, second = RequestContext.new("tools/call"), RequestContext.new("tools/call")
    assert first.request_id != second.request_id
    assert first.received_at.tzinfo is not None


def test_bound_context_binds_and_restores():
    structlog.contextvars.clear_contextvars()
    ctx = RequestContext.new("tools/call", request_id="req-9")

    with bound_context(ctx, tool="get_balance"):
        bound = structlog.contextvars.get_contextvars()
        assert bound["request_id"] == "req-9"
        assert bound["tool"] == "get_balance"

    assert "request_id" not in structlog.contextvars.get_contextvars()


@pytest.mark.asyncio
async def test_concurrent_contexts_do_not_leak():
    async def observe(request_id):
        with bound_context(RequestContext.new("ping", request_id=request_id)):
            await asyncio.sleep(0)
            return structlog.contextvars.get_contextvars()["request_id"]

    assert await asyncio.gather(observe("a"), observe("b")) == ["a", "b"]
