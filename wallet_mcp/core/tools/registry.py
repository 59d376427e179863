"""
Tool Registry and Dispatcher.

The registry is built once at startup from the tool definitions and the
handlers on ``WalletTools`` and is read-only afterwards. The dispatcher
validates arguments at the boundary, invokes the handler and turns every
failure into a ``ToolError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Coroutine, Dict, List, Mapping, Optional

import structlog
from pydantic import BaseModel

from ..context import RequestContext, bound_context
from ..errors import Internal, ToolError, UnknownTool
from .arguments import parse_arguments
from .definitions import ToolDefinition, ToolName
from .handlers import WalletTools

logger = structlog.stdlib.get_logger(__name__)

Handler = Callable[[Any], Coroutine[Any, Any, BaseModel]]


@dataclass(frozen=True)
class RegisteredTool:
    """A tool registered in the registry with its definition and handler."""
    definition: ToolDefinition
    handler: Handler


@dataclass
class DispatchResult:
    """Outcome of one tool invocation; exactly one of result/error is set."""
    request_id: str
    tool: str
    result: Optional[BaseModel] = None
    error: Optional[ToolError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ToolRegistry:
    """Immutable mapping from tool name to definition and handler."""

    def __init__(self, tools: Mapping[ToolName, RegisteredTool]):
        self._tools: Mapping[ToolName, RegisteredTool] = MappingProxyType(dict(tools))

    @classmethod
    def build(cls, tools: WalletTools, definitions: Mapping[ToolName, ToolDefinition]) -> "ToolRegistry":
        handlers: Dict[ToolName, Handler] = {
            ToolName.GET_BALANCE: tools.get_balance,
            ToolName.GET_TOKEN_PRICE: tools.get_token_price,
            ToolName.SWAP_TOKENS: tools.swap_tokens,
        }
        return cls({
            name: RegisteredTool(definition=definitions[name], handler=handler)
            for name, handler in handlers.items()
        })

    def definitions(self) -> List[ToolDefinition]:
        """Tool definitions in registration order, for tools/list."""
        return [tool.definition for tool in self._tools.values()]

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        try:
            return self._tools.get(ToolName(name))
        except ValueError:
            return None

    def has_tool(self, name: str) -> bool:
        return self.get_tool(name) is not None


class ToolDispatcher:
    """
    Executes tool calls.

    Never raises: unexpected exceptions are logged with their traceback and
    reported to the caller as ``Internal`` without their message.
    """

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def dispatch(
        self,
        name: str,
        arguments: Any,
        ctx: Optional[RequestContext] = None,
    ) -> DispatchResult:
        ctx = ctx or RequestContext.new("tools/call")
        with bound_context(ctx, tool=name):
            logger.info("tool_call_started")
            try:
                result = await self._invoke(name, arguments)
            except ToolError as exc:
                logger.warning(
                    "tool_call_failed",
                    kind=exc.kind.value,
                    code=exc.code,
                    retryable=exc.retryable,
                    error=exc.message,
                    duration_ms=ctx.elapsed_ms,
                )
                return DispatchResult(request_id=ctx.request_id, tool=name, error=exc)
            except Exception:
                logger.exception("tool_call_failed", kind="Internal", duration_ms=ctx.elapsed_ms)
                return DispatchResult(request_id=ctx.request_id, tool=name, error=Internal())

            logger.info("tool_call_completed", duration_ms=ctx.elapsed_ms)
            return DispatchResult(request_id=ctx.request_id, tool=name, result=result)

    async def _invoke(self, name: str, arguments: Any) -> BaseModel:
        tool = self.registry.get_tool(name)
        if tool is None:
            raise UnknownTool(name)
        args = parse_arguments(tool.definition, arguments)
        return await tool.handler(args)
