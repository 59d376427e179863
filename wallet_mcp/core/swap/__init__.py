from .router import GAS_SOURCE_FALLBACK, GAS_SOURCE_NODE, GasEstimator, QuoteRouter, minimum_output
from .strategies import (
    QuoteStrategy,
    RouteQuote,
    UniswapV2ReserveStrategy,
    UniswapV3QuoterStrategy,
    constant_product_out,
)

__all__ = [
    "GAS_SOURCE_FALLBACK",
    "GAS_SOURCE_NODE",
    "GasEstimator",
    "QuoteRouter",
    "QuoteStrategy",
    "RouteQuote",
    "UniswapV2ReserveStrategy",
    "UniswapV3QuoterStrategy",
    "constant_product_out",
    "minimum_output",
]
