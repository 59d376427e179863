"""
Error Taxonomy

Closed set of errors shared by the dispatcher, tool handlers, quote router and
providers. Each kind maps to a stable JSON-RPC error code. Handlers raise
these; the dispatcher turns them into the response envelope.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Stable identifiers surfaced to clients in ``error.data.kind``."""

    UNKNOWN_TOOL = "UnknownTool"
    MISSING_PARAMETER = "MissingParameter"
    INVALID_PARAMETER = "InvalidParameter"
    TOKEN_NOT_FOUND = "TokenNotFound"
    NO_LIQUIDITY = "NoLiquidity"
    CHAIN_UNAVAILABLE = "ChainUnavailable"
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    INTERNAL = "Internal"


ERROR_CODES: Dict[ErrorKind, int] = {
    ErrorKind.UNKNOWN_TOOL: -32601,
    ErrorKind.MISSING_PARAMETER: -32602,
    ErrorKind.INVALID_PARAMETER: -32602,
    ErrorKind.TOKEN_NOT_FOUND: -32001,
    ErrorKind.NO_LIQUIDITY: -32002,
    ErrorKind.CHAIN_UNAVAILABLE: -32003,
    ErrorKind.UPSTREAM_UNAVAILABLE: -32004,
    ErrorKind.INTERNAL: -32603,
}

# Kinds the caller may reasonably retry later.
RETRYABLE_KINDS = frozenset({ErrorKind.CHAIN_UNAVAILABLE, ErrorKind.UPSTREAM_UNAVAILABLE})


class ToolError(Exception):
    """Base class for every error a tool call can surface."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    @property
    def code(self) -> int:
        return ERROR_CODES[self.kind]

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def to_data(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, **self.details}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class UnknownTool(ToolError):
    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}", {"tool": name})
        self.name = name


class MissingParameter(ToolError):
    kind = ErrorKind.MISSING_PARAMETER

    def __init__(self, name: str):
        super().__init__(f"Missing required parameter: {name}", {"parameter": name})
        self.name = name


class InvalidParameter(ToolError):
    kind = ErrorKind.INVALID_PARAMETER

    def __init__(self, name: str, reason: str):
        super().__init__(f"Invalid parameter '{name}': {reason}", {"parameter": name, "reason": reason})
        self.name = name
        self.reason = reason


class TokenNotFound(ToolError):
    kind = ErrorKind.TOKEN_NOT_FOUND

    def __init__(self, token_address: str, reason: str = "no data available for token"):
        super().__init__(f"Token not found: {token_address} ({reason})", {"token_address": token_address})
        self.token_address = token_address


class NoLiquidity(ToolError):
    kind = ErrorKind.NO_LIQUIDITY

    def __init__(self, from_token: str, to_token: str):
        super().__init__(
            f"No liquidity route found for {from_token} -> {to_token}",
            {"from_token": from_token, "to_token": to_token},
        )


class ChainUnavailable(ToolError):
    """Chain read did not complete (timeout or transport failure after retry)."""

    kind = ErrorKind.CHAIN_UNAVAILABLE

    def __init__(self, message: str = "Ethereum node unavailable", operation: Optional[str] = None):
        super().__init__(message, {"operation": operation} if operation else {})
        self.operation = operation


class UpstreamUnavailable(ToolError):
    """Price source unreachable, timed out or rate limited."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE

    def __init__(self, message: str = "Price source unavailable", provider: Optional[str] = None):
        super().__init__(message, {"provider": provider} if provider else {})
        self.provider = provider


class Internal(ToolError):
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)


class ContractReverted(Exception):
    """
    A read-only call was rejected by the EVM.

    Reverts are semantic, not transient: they are never retried and never
    reach the client directly. Quote strategies, the metadata resolver and the
    gas estimator consume them.
    """

    def __init__(self, message: str = "execution reverted", data: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.data = data
