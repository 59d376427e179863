"""Quote routing: ordered strategies, slippage annotation and gas estimation."""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Dict, Optional, Sequence, Tuple

import structlog

from ...providers.base import ChainClient
from ..errors import ChainUnavailable, ContractReverted, NoLiquidity
from .strategies import QuoteStrategy, RouteQuote, UniswapV2ReserveStrategy, UniswapV3QuoterStrategy

logger = structlog.stdlib.get_logger(__name__)

GAS_SOURCE_NODE = "node"
GAS_SOURCE_FALLBACK = "fallback"


def minimum_output(amount_out: int, slippage_tolerance: Decimal) -> int:
    """Lowest acceptable output for ``slippage_tolerance`` percent, rounded down."""
    with localcontext() as ctx:
        ctx.prec = 200
        factor = (Decimal(100) - slippage_tolerance) / Decimal(100)
        return int((Decimal(amount_out) * factor).to_integral_value(rounding=ROUND_DOWN))


class QuoteRouter:
    """
    Tries each strategy exactly once, in order, and returns the first quote.

    Slippage never rejects a quote here; callers receive the expected output
    and the minimum implied by their tolerance.
    """

    def __init__(self, strategies: Sequence[QuoteStrategy]):
        if not strategies:
            raise ValueError("QuoteRouter needs at least one strategy")
        self.strategies = tuple(strategies)

    @classmethod
    def uniswap(cls, chain: ChainClient) -> "QuoteRouter":
        """V3 quoter first, V2 reserves as fallback."""
        return cls([UniswapV3QuoterStrategy(chain), UniswapV2ReserveStrategy(chain)])

    async def best_quote(self, token_in: str, token_out: str, amount_in: int) -> Tuple[QuoteStrategy, RouteQuote]:
        for strategy in self.strategies:
            quote = await strategy.quote(token_in, token_out, amount_in)
            if quote is not None:
                logger.info(
                    "swap_route_selected",
                    route=quote.route.value,
                    fee_tier=quote.fee_tier,
                    amount_out=str(quote.amount_out),
                )
                return strategy, quote
            logger.info("swap_route_unavailable", route=strategy.route.value)
        raise NoLiquidity(token_in, token_out)


class GasEstimator:
    """
    Estimates gas for the simulated swap.

    A read-only simulation has no approval or signature behind it, so
    ``eth_estimateGas`` routinely reverts; that substitutes a fixed estimate
    instead of failing the quote.
    """

    def __init__(self, chain: ChainClient, fallback_gas_units: int = 200_000):
        self._chain = chain
        self.fallback_gas_units = fallback_gas_units

    async def estimate(self, call: Dict[str, str]) -> Tuple[int, str]:
        error: Optional[str]
        try:
            units = await self._chain.estimate_gas(call)
        except ContractReverted as exc:
            error = exc.message
        except ChainUnavailable as exc:
            error = exc.message
        else:
            if units > 0:
                return units, GAS_SOURCE_NODE
            error = "node returned zero gas"

        logger.info("gas_estimate_fallback", gas_units=self.fallback_gas_units, error=error)
        return self.fallback_gas_units, GAS_SOURCE_FALLBACK
