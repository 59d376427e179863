import pytest

from wallet_mcp.core.errors import ChainUnavailable, TokenNotFound
from wallet_mcp.core.metadata import TokenMetadata, TokenMetadataResolver
from wallet_mcp.providers.token_list import KNOWN_TOKENS, TOKEN_LIST_SOURCE

from conftest import UNLISTED_TOKEN, USDC, FakeChainClient


@pytest.mark.asyncio
async def test_chain_metadata_wins():
    chain = FakeChainClient()
    chain.metadata[USDC.lower()] = TokenMetadata(USDC, "USDC", "USD Coin", 6)
    resolver = TokenMetadataResolver(chain, KNOWN_TOKENS)

    metadata = await resolver.resolve(USDC)

    assert metadata.source == "chain"
    assert metadata.decimals == 6


@pytest.mark.asyncio
async def test_falls_back_to_known_tokens_on_revert():
    resolver = TokenMetadataResolver(FakeChainClient(), KNOWN_TOKENS)

    metadata = await resolver.resolve(USDC)

    assert metadata.symbol == "USDC"
    assert metadata.decimals == 6
    assert metadata.source == TOKEN_LIST_SOURCE


@pytest.mark.asyncio
async def test_falls_back_when_node_unavailable():
    chain = FakeChainClient()
    chain.metadata[USDC.lower()] = ChainUnavailable("timed out", operation="eth_call")
    resolver = TokenMetadataResolver(chain, KNOWN_TOKENS)

    assert (await resolver.resolve(USDC)).source == TOKEN_LIST_SOURCE


@pytest.mark.asyncio
async def test_unknown_token_defaults_to_eighteen_decimals():
    resolver = TokenMetadataResolver(FakeChainClient(), KNOWN_TOKENS)

    metadata = await resolver.resolve(UNLISTED_TOKEN)

    assert metadata.symbol == "UNKNOWN"
    assert metadata.decimals == 18
    assert metadata.source == "default"


@pytest.mark.asyncio
async def test_strict_resolution_raises_token_not_found():
    resolver = TokenMetadataResolver(FakeChainClient(), KNOWN_TOKENS)

    with pytest.raises(TokenNotFound):
        await resolver.resolve_strict(UNLISTED_TOKEN)


def test_known_token_table_is_read_only():
    with pytest.raises(TypeError):
        KNOWN_TOKENS["0xdead"] = TokenMetadata("0xdead", "X", "X", 18)


def test_metadata_rejects_out_of_range_decimals():
    with pytest.raises(ValueError):
        TokenMetadata(USDC, "USDC", "USD Coin", 256)
