from ..config import ConfigurationError, Settings
from .alchemy import AlchemyPriceProvider, AlchemyProvider
from .base import ChainClient, PriceProvider, Provider
from .coingecko import CoingeckoProvider
from .token_list import KNOWN_TOKENS


def build_chain_client(settings: Settings) -> ChainClient:
    """Pooled JSON-RPC client shared by every in-flight request."""
    return AlchemyProvider(
        rpc_url=settings.rpc_url,
        timeout_s=settings.chain_timeout_seconds,
        max_connections=settings.max_connections,
    )


def build_price_provider(settings: Settings) -> PriceProvider:
    """The single configured upstream price source."""
    if settings.price_provider == "alchemy":
        return AlchemyPriceProvider(
            api_key=settings.alchemy_api_key,
            timeout_s=settings.price_timeout_seconds,
        )
    if settings.price_provider == "coingecko":
        return CoingeckoProvider(
            api_key=settings.coingecko_api_key,
            timeout_s=settings.price_timeout_seconds,
        )
    raise ConfigurationError(f"Unsupported PRICE_PROVIDER '{settings.price_provider}'")


__all__ = [
    "AlchemyPriceProvider",
    "AlchemyProvider",
    "ChainClient",
    "CoingeckoProvider",
    "KNOWN_TOKENS",
    "PriceProvider",
    "Provider",
    "build_chain_client",
    "build_price_provider",
]
