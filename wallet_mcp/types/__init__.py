from .jsonrpc import JsonRpcError, JsonRpcRequest, JsonRpcResponse, ToolCallParams
from .results import (
    AmountView,
    BalanceResult,
    PriceResult,
    SwapQuote,
    SwapRoute,
    TokenBalance,
    TokenInfo,
)

__all__ = [
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "ToolCallParams",
    "AmountView",
    "BalanceResult",
    "PriceResult",
    "SwapQuote",
    "SwapRoute",
    "TokenBalance",
    "TokenInfo",
]
