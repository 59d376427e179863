"""
JSON-RPC method handling for the MCP endpoint.

``MCPServer`` is transport-agnostic: it takes an already-decoded JSON body
(one message or a batch) and returns the wire response, or ``None`` when
nothing should be sent back (notifications).
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import structlog
from pydantic import ValidationError

from . import __version__
from .core.context import RequestContext, bound_context
from .core.metadata import TokenMetadataResolver
from .core.swap import GasEstimator, QuoteRouter
from .core.tools import ToolDispatcher, ToolRegistry, WalletTools, build_definitions
from .config import Settings
from .providers.base import ChainClient, PriceProvider
from .providers.token_list import KNOWN_TOKENS
from .types.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolCallParams,
)

logger = structlog.stdlib.get_logger(__name__)

SERVER_NAME = "wallet-mcp"
MCP_PROTOCOL_VERSION = "2024-11-05"

WireMessage = Dict[str, Any]
MethodHandler = Callable[[JsonRpcRequest, RequestContext], Awaitable[JsonRpcResponse]]


def _validation_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    return [{"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()]


class MCPServer:
    """Routes JSON-RPC methods to the tool registry and dispatcher."""

    def __init__(self, registry: ToolRegistry, dispatcher: ToolDispatcher):
        self.registry = registry
        self.dispatcher = dispatcher
        self._methods: Dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    @classmethod
    def build(cls, chain: ChainClient, price_provider: PriceProvider, settings: Settings) -> "MCPServer":
        """Wire handlers, router and registry around the injected clients."""
        tools = WalletTools(
            chain=chain,
            price_provider=price_provider,
            metadata=TokenMetadataResolver(chain, KNOWN_TOKENS),
            router=QuoteRouter.uniswap(chain),
            gas=GasEstimator(chain, fallback_gas_units=settings.fallback_gas_units),
        )
        registry = ToolRegistry.build(tools, build_definitions(settings.default_slippage_tolerance))
        return cls(registry, ToolDispatcher(registry))

    async def handle_payload(self, payload: Any) -> Optional[Union[WireMessage, List[WireMessage]]]:
        """Handle a single message or a batch; batch members run concurrently."""
        if isinstance(payload, list):
            if not payload:
                return JsonRpcResponse.failure(None, INVALID_REQUEST, "Invalid Request: empty batch").to_wire()
            responses = await asyncio.gather(*(self.handle_message(message) for message in payload))
            return [response for response in responses if response is not None] or None
        return await self.handle_message(payload)

    async def handle_message(self, message: Any) -> Optional[WireMessage]:
        if not isinstance(message, dict):
            return JsonRpcResponse.failure(None, INVALID_REQUEST, "Invalid Request: expected an object").to_wire()

        is_notification = "id" not in message
        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            raw_id = message.get("id")
            request_id = raw_id if isinstance(raw_id, (int, str)) and not isinstance(raw_id, bool) else None
            return JsonRpcResponse.failure(
                request_id, INVALID_REQUEST, "Invalid Request", {"errors": _validation_errors(exc)}
            ).to_wire()
        if request.jsonrpc != JSONRPC_VERSION:
            return JsonRpcResponse.failure(request.id, INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'").to_wire()

        ctx = RequestContext.new(request.method)
        with bound_context(ctx):
            response = await self._route(request, ctx)

        if is_notification:
            return None
        return response.to_wire()

    async def _route(self, request: JsonRpcRequest, ctx: RequestContext) -> JsonRpcResponse:
        handler = self._methods.get(request.method)
        if handler is None:
            logger.info("rpc_method_not_found")
            return JsonRpcResponse.failure(
                request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}", {"request_id": ctx.request_id}
            )
        try:
            return await handler(request, ctx)
        except Exception:
            logger.exception("rpc_method_failed")
            return JsonRpcResponse.failure(
                request.id, INTERNAL_ERROR, "Internal error", {"kind": "Internal", "request_id": ctx.request_id}
            )

    async def _initialize(self, request: JsonRpcRequest, ctx: RequestContext) -> JsonRpcResponse:
        return JsonRpcResponse(
            id=request.id,
            result={
                "protocolVersion": MCP_PROTOCOL_VERSION,
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {"name": SERVER_NAME, "version": __version__},
            },
        )

    async def _ping(self, request: JsonRpcRequest, ctx: RequestContext) -> JsonRpcResponse:
        return JsonRpcResponse(id=request.id, result={})

    async def _tools_list(self, request: JsonRpcRequest, ctx: RequestContext) -> JsonRpcResponse:
        tools = [definition.to_mcp_format() for definition in self.registry.definitions()]
        return JsonRpcResponse(id=request.id, result={"tools": tools})

    async def _tools_call(self, request: JsonRpcRequest, ctx: RequestContext) -> JsonRpcResponse:
        try:
            params = ToolCallParams.model_validate(request.params or {})
        except ValidationError as exc:
            return JsonRpcResponse.failure(
                request.id,
                INVALID_PARAMS,
                "Invalid params: tools/call needs {name, arguments}",
                {"request_id": ctx.request_id, "errors": _validation_errors(exc)},
            )

        outcome = await self.dispatcher.dispatch(params.name, params.arguments, ctx)
        if outcome.error is not None:
            return JsonRpcResponse.failure(
                request.id,
                outcome.error.code,
                outcome.error.message,
                {**outcome.error.to_data(), "request_id": outcome.request_id},
            )

        structured = outcome.result.model_dump(mode="json")
        return JsonRpcResponse(
            id=request.id,
            result={
                "content": [{"type": "text", "text": json.dumps(structured)}],
                "structuredContent": structured,
                "isError": False,
                "request_id": outcome.request_id,
            },
        )
