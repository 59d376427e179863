"""
Quote strategies tried in order by the quote router.

A strategy returns a ``RouteQuote`` when it can price the swap, ``None`` when
its path explicitly has nothing to offer (reverts, missing pool, empty
reserves), and raises ``ChainUnavailable`` when it could not find out.
Adding a route (e.g. an aggregator) means adding a strategy.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import structlog
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from ...providers.base import ChainClient
from ...types.results import SwapRoute
from ..addresses import ZERO_ADDRESS, same_address, sort_pair
from ..errors import ChainUnavailable, ContractReverted
from .constants import (
    SIMULATION_SENDER,
    SWAP_DEADLINE_SECONDS,
    V2_FACTORY,
    V2_FEE_BPS,
    V2_ROUTER,
    V3_FEE_TIERS,
    V3_QUOTER,
    V3_SWAP_ROUTER,
)

logger = structlog.stdlib.get_logger(__name__)

QUOTE_EXACT_INPUT_SINGLE = function_signature_to_4byte_selector(
    "quoteExactInputSingle(address,address,uint24,uint256,uint160)"
)
EXACT_INPUT_SINGLE = function_signature_to_4byte_selector(
    "exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))"
)
GET_PAIR = function_signature_to_4byte_selector("getPair(address,address)")
GET_RESERVES = function_signature_to_4byte_selector("getReserves()")
SWAP_EXACT_TOKENS_FOR_TOKENS = function_signature_to_4byte_selector(
    "swapExactTokensForTokens(uint256,uint256,address[],address,uint256)"
)


@dataclass(frozen=True)
class RouteQuote:
    route: SwapRoute
    amount_out: int
    fee_tier: Optional[int] = None


def constant_product_out(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int = V2_FEE_BPS) -> int:
    """x*y=k output for ``amount_in`` after the pool fee, rounded down."""
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0
    amount_in_with_fee = amount_in * (10_000 - fee_bps)
    return (amount_in_with_fee * reserve_out) // (reserve_in * 10_000 + amount_in_with_fee)


def _deadline() -> int:
    return int(time.time()) + SWAP_DEADLINE_SECONDS


def _call_object(to: str, data: bytes) -> Dict[str, str]:
    return {"from": SIMULATION_SENDER, "to": to, "data": "0x" + data.hex()}


class QuoteStrategy(ABC):
    """One way of pricing an exact-input swap."""

    route: SwapRoute

    def __init__(self, chain: ChainClient):
        self._chain = chain

    @abstractmethod
    async def quote(self, token_in: str, token_out: str, amount_in: int) -> Optional[RouteQuote]:
        pass

    @abstractmethod
    def swap_call(self, token_in: str, token_out: str, amount_in: int, quote: RouteQuote, minimum_out: int) -> Dict[str, str]:
        """Unsigned call object for estimating gas of the equivalent swap."""
        pass


class UniswapV3QuoterStrategy(QuoteStrategy):
    """Concentrated-liquidity quote via the V3 Quoter, best output across fee tiers."""

    route = SwapRoute.V3

    def __init__(
        self,
        chain: ChainClient,
        quoter: str = V3_QUOTER,
        swap_router: str = V3_SWAP_ROUTER,
        fee_tiers: Sequence[int] = V3_FEE_TIERS,
    ):
        super().__init__(chain)
        self.quoter = quoter
        self.swap_router = swap_router
        self.fee_tiers = tuple(fee_tiers)

    async def _quote_tier(self, token_in: str, token_out: str, fee: int, amount_in: int) -> int:
        data = QUOTE_EXACT_INPUT_SINGLE + encode(
            ["address", "address", "uint24", "uint256", "uint160"],
            [token_in, token_out, fee, amount_in, 0],
        )
        raw = await self._chain.call_contract(self.quoter, data)
        try:
            (amount_out,) = decode(["uint256"], raw)
        except DecodingError as exc:
            raise ValueError(f"undecodable quoter response: {exc}") from exc
        return amount_out

    async def quote(self, token_in: str, token_out: str, amount_in: int) -> Optional[RouteQuote]:
        results = await asyncio.gather(
            *(self._quote_tier(token_in, token_out, fee, amount_in) for fee in self.fee_tiers),
            return_exceptions=True,
        )

        best: Optional[RouteQuote] = None
        transport_failure: Optional[ChainUnavailable] = None
        explicit_failure = False
        for fee, result in zip(self.fee_tiers, results):
            if isinstance(result, ChainUnavailable):
                transport_failure = result
                logger.warning("v3_quote_tier_unavailable", fee_tier=fee, error=result.message)
            elif isinstance(result, (ContractReverted, ValueError)):
                logger.debug("v3_quote_tier_failed", fee_tier=fee, error=str(result))
                explicit_failure = True
            elif isinstance(result, BaseException):
                raise result
            elif result <= 0:
                logger.debug("v3_quote_tier_empty", fee_tier=fee)
                explicit_failure = True
            elif best is None or result > best.amount_out:
                best = RouteQuote(route=self.route, amount_out=result, fee_tier=fee)

        if best is None and transport_failure is not None and not explicit_failure:
            # Every tier was unreachable: V3 never answered, so V2 would misreport the route.
            raise transport_failure
        return best

    def swap_call(self, token_in: str, token_out: str, amount_in: int, quote: RouteQuote, minimum_out: int) -> Dict[str, str]:
        params = (token_in, token_out, quote.fee_tier, SIMULATION_SENDER, _deadline(), amount_in, minimum_out, 0)
        data = EXACT_INPUT_SINGLE + encode(
            ["(address,address,uint24,address,uint256,uint256,uint256,uint160)"], [params]
        )
        return _call_object(self.swap_router, data)


class UniswapV2ReserveStrategy(QuoteStrategy):
    """Constant-product quote from the V2 pair's reserves."""

    route = SwapRoute.V2

    def __init__(
        self,
        chain: ChainClient,
        factory: str = V2_FACTORY,
        router: str = V2_ROUTER,
        fee_bps: int = V2_FEE_BPS,
    ):
        super().__init__(chain)
        self.factory = factory
        self.router = router
        self.fee_bps = fee_bps

    async def _get_pair(self, token_in: str, token_out: str) -> Optional[str]:
        raw = await self._chain.call_contract(
            self.factory, GET_PAIR + encode(["address", "address"], [token_in, token_out])
        )
        (pair,) = decode(["address"], raw)
        if same_address(pair, ZERO_ADDRESS):
            return None
        return pair

    async def _get_reserves(self, pair: str) -> tuple[int, int]:
        raw = await self._chain.call_contract(pair, GET_RESERVES)
        reserve0, reserve1, _ = decode(["uint112", "uint112", "uint32"], raw)
        return reserve0, reserve1

    async def quote(self, token_in: str, token_out: str, amount_in: int) -> Optional[RouteQuote]:
        try:
            pair = await self._get_pair(token_in, token_out)
            if pair is None:
                logger.debug("v2_pair_missing", token_in=token_in, token_out=token_out)
                return None
            reserve0, reserve1 = await self._get_reserves(pair)
        except (ContractReverted, DecodingError) as exc:
            logger.debug("v2_reserves_unavailable", error=str(exc))
            return None

        token0, _ = sort_pair(token_in, token_out)
        if same_address(token0, token_in):
            reserve_in, reserve_out = reserve0, reserve1
        else:
            reserve_in, reserve_out = reserve1, reserve0

        amount_out = constant_product_out(amount_in, reserve_in, reserve_out, self.fee_bps)
        if amount_out <= 0:
            logger.debug("v2_reserves_empty", pair=pair, reserve_in=reserve_in, reserve_out=reserve_out)
            return None
        return RouteQuote(route=self.route, amount_out=amount_out)

    def swap_call(self, token_in: str, token_out: str, amount_in: int, quote: RouteQuote, minimum_out: int) -> Dict[str, str]:
        data = SWAP_EXACT_TOKENS_FOR_TOKENS + encode(
            ["uint256", "uint256", "address[]", "address", "uint256"],
            [amount_in, minimum_out, [token_in, token_out], SIMULATION_SENDER, _deadline()],
        )
        return _call_object(self.router, data)
