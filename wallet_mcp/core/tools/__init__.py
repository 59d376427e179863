from .arguments import GetBalanceArgs, GetTokenPriceArgs, SwapTokensArgs, parse_arguments
from .definitions import ToolDefinition, ToolName, ToolParameter, build_definitions
from .handlers import WalletTools
from .registry import DispatchResult, RegisteredTool, ToolDispatcher, ToolRegistry

__all__ = [
    "DispatchResult",
    "GetBalanceArgs",
    "GetTokenPriceArgs",
    "RegisteredTool",
    "SwapTokensArgs",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolName",
    "ToolParameter",
    "ToolRegistry",
    "WalletTools",
    "build_definitions",
    "parse_arguments",
]
