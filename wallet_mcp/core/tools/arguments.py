"""
Boundary validation for tool arguments.

Untyped JSON arguments are converted into typed, validated argument objects
exactly once; handlers only ever receive these objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Type, Union

from ..addresses import parse_address, same_address
from ..amounts import parse_decimal
from ..errors import InvalidParameter, MissingParameter
from .definitions import ParameterKind, ToolDefinition, ToolName

MAX_SWAP_AMOUNT = Decimal(1_000_000_000)


def _coerce_address(name: str, value: Any) -> str:
    try:
        return parse_address(value)
    except ValueError as exc:
        raise InvalidParameter(name, str(exc)) from None


def _coerce_decimal(name: str, value: Any) -> Decimal:
    # JSON numbers are tolerated; str() keeps 0.1 as 0.1 rather than its binary float.
    if isinstance(value, float):
        value = str(value)
    try:
        return parse_decimal(value)
    except ValueError as exc:
        raise InvalidParameter(name, str(exc)) from None


_COERCERS = {
    ParameterKind.ADDRESS: _coerce_address,
    ParameterKind.DECIMAL: _coerce_decimal,
}


@dataclass(frozen=True)
class GetBalanceArgs:
    address: str
    token_address: Optional[str] = None


@dataclass(frozen=True)
class GetTokenPriceArgs:
    token_address: str


@dataclass(frozen=True)
class SwapTokensArgs:
    from_token: str
    to_token: str
    amount: Decimal
    slippage_tolerance: Decimal

    def __post_init__(self) -> None:
        if same_address(self.from_token, self.to_token):
            raise InvalidParameter("to_token", "must differ from from_token")
        if self.amount <= 0:
            raise InvalidParameter("amount", "must be positive")
        if self.amount > MAX_SWAP_AMOUNT:
            raise InvalidParameter("amount", f"must not exceed {MAX_SWAP_AMOUNT}")
        if self.slippage_tolerance <= 0 or self.slippage_tolerance > 100:
            raise InvalidParameter("slippage_tolerance", "must be in (0, 100]")


ToolArguments = Union[GetBalanceArgs, GetTokenPriceArgs, SwapTokensArgs]

ARGUMENT_TYPES: Mapping[ToolName, Type[Any]] = {
    ToolName.GET_BALANCE: GetBalanceArgs,
    ToolName.GET_TOKEN_PRICE: GetTokenPriceArgs,
    ToolName.SWAP_TOKENS: SwapTokensArgs,
}


def parse_arguments(definition: ToolDefinition, arguments: Any) -> ToolArguments:
    """Validate ``arguments`` against ``definition`` and build the typed arguments.

    Unknown keys are ignored. ``null`` counts as absent.

    Raises:
        MissingParameter: a required parameter is absent.
        InvalidParameter: a value is malformed or violates a tool constraint.
    """

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidParameter("arguments", "must be an object")

    values: Dict[str, Any] = {}
    for param in definition.parameters:
        raw = arguments.get(param.name)
        if raw is None:
            if param.required:
                raise MissingParameter(param.name)
            if param.default is not None:
                values[param.name] = param.default
            continue
        values[param.name] = _COERCERS[param.kind](param.name, raw)

    return ARGUMENT_TYPES[definition.name](**values)
