"""Token metadata resolution with a known-token fallback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

import structlog

from .amounts import MAX_DECIMALS
from .errors import ChainUnavailable, ContractReverted, TokenNotFound

if TYPE_CHECKING:
    from ..providers.base import ChainClient

logger = structlog.stdlib.get_logger(__name__)

UNKNOWN_SYMBOL = "UNKNOWN"
UNKNOWN_NAME = "Unknown Token"
DEFAULT_DECIMALS = 18


@dataclass(frozen=True)
class TokenMetadata:
    """Immutable token description; decimals never change for a token."""

    address: str
    symbol: str
    name: str
    decimals: int
    source: str = "chain"

    def __post_init__(self) -> None:
        if not 0 <= self.decimals <= MAX_DECIMALS:
            raise ValueError(f"decimals out of range: {self.decimals}")

    @classmethod
    def unknown(cls, address: str) -> "TokenMetadata":
        return cls(
            address=address,
            symbol=UNKNOWN_SYMBOL,
            name=UNKNOWN_NAME,
            decimals=DEFAULT_DECIMALS,
            source="default",
        )


class TokenMetadataResolver:
    """
    Resolves token metadata from the chain, then the known-token table.

    ``resolve`` never fails: balance reads are worth more than complete
    metadata, so a token absent from both sources gets UNKNOWN/18.
    ``resolve_strict`` raises ``TokenNotFound`` instead, for callers such as
    the quote router that cannot proceed without real decimals.
    """

    def __init__(self, chain: "ChainClient", known_tokens: Mapping[str, TokenMetadata]):
        self._chain = chain
        self._known_tokens = known_tokens

    async def _lookup(self, token_address: str) -> TokenMetadata | None:
        try:
            return await self._chain.get_token_metadata(token_address)
        except (ContractReverted, ChainUnavailable, ValueError) as exc:
            fallback = self._known_tokens.get(token_address.lower())
            logger.warning(
                "token_metadata_fallback",
                token_address=token_address,
                error=str(exc),
                fallback=fallback.symbol if fallback else None,
            )
            return fallback

    async def resolve(self, token_address: str) -> TokenMetadata:
        metadata = await self._lookup(token_address)
        return metadata or TokenMetadata.unknown(token_address)

    async def resolve_strict(self, token_address: str) -> TokenMetadata:
        metadata = await self._lookup(token_address)
        if metadata is None:
            raise TokenNotFound(token_address, "decimals unavailable on-chain and not a known token")
        return metadata
