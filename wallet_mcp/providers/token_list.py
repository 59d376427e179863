"""
Token metadata fallback table for well-known Ethereum mainnet tokens.

Built once at import, exposed read-only, and injected into the metadata
resolver rather than consulted as a hidden global.
"""

from types import MappingProxyType
from typing import Mapping

from ..core.metadata import TokenMetadata

TOKEN_LIST_SOURCE = "token_list"

_ENTRIES = (
    # Stablecoins
    ("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "USDC", "USD Coin", 6),
    ("0xdAC17F958D2ee523a2206206994597C13D831ec7", "USDT", "Tether USD", 6),
    ("0x6B175474E89094C44Da98b954EedeAC495271d0F", "DAI", "Dai Stablecoin", 18),
    ("0x4Fabb145d64652a948d72533023f6E7A623C7C53", "BUSD", "Binance USD", 18),
    # Wrapped assets
    ("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "WETH", "Wrapped Ether", 18),
    ("0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599", "WBTC", "Wrapped BTC", 8),
    # Majors
    ("0x514910771AF9Ca656af840dff83E8264EcF986CA", "LINK", "ChainLink Token", 18),
    ("0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984", "UNI", "Uniswap", 18),
    ("0x7D1AfA7B718fb893dB30A3aBc0Cfc608AaCfeBB0", "MATIC", "Polygon", 18),
    ("0x95aD61b0a150d79219dCF64E1E6Cc01f0B64C4cE", "SHIB", "Shiba Inu", 18),
    ("0x7Fc66500c84A76Ad7e9c93437bFc5Ac33E2DDaE9", "AAVE", "Aave Token", 18),
    ("0x9f8F72aA9304c8B593d555F12eF6589cC3A579A2", "MKR", "Maker", 18),
)


def _build_table() -> Mapping[str, TokenMetadata]:
    table = {}
    for address, symbol, name, decimals in _ENTRIES:
        table[address.lower()] = TokenMetadata(
            address=address,
            symbol=symbol,
            name=name,
            decimals=decimals,
            source=TOKEN_LIST_SOURCE,
        )
    return MappingProxyType(table)


KNOWN_TOKENS: Mapping[str, TokenMetadata] = _build_table()
