"""
Shared fakes for the wallet tool tests.

``FakeChainClient`` stands in for the node; ``FakeUniswap`` answers the
contract calls the quote strategies make (V3 quoter, V2 factory and pairs).
Nothing here touches the network.
"""

from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest
from eth_abi import decode, encode

from wallet_mcp.config import Settings
from wallet_mcp.core.addresses import ZERO_ADDRESS, same_address, sort_pair
from wallet_mcp.core.errors import ContractReverted, TokenNotFound
from wallet_mcp.core.metadata import TokenMetadata, TokenMetadataResolver
from wallet_mcp.core.swap import GasEstimator, QuoteRouter
from wallet_mcp.core.swap.constants import V2_FACTORY, V3_QUOTER
from wallet_mcp.core.swap.strategies import GET_PAIR, GET_RESERVES, QUOTE_EXACT_INPUT_SINGLE
from wallet_mcp.core.tools import WalletTools
from wallet_mcp.providers.base import ChainClient, PriceProvider
from wallet_mcp.providers.token_list import KNOWN_TOKENS

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
UNLISTED_TOKEN = "0x1111111111111111111111111111111111111111"
PAIR = "0x" + "ab" * 20

Outcome = Union[int, Exception]


class FakeUniswap:
    """Answers quoter, factory and pair calls from in-memory pool state."""

    def __init__(self):
        self.v3_outputs: Dict[int, Outcome] = {}
        self.pairs: Dict[frozenset, str] = {}
        self.reserves: Dict[str, Tuple[int, int]] = {}

    def add_v2_pair(self, token_a: str, token_b: str, reserve_a: int, reserve_b: int, pair: str = PAIR) -> None:
        self.pairs[frozenset({token_a.lower(), token_b.lower()})] = pair
        token0, _ = sort_pair(token_a, token_b)
        if same_address(token0, token_a):
            self.reserves[pair.lower()] = (reserve_a, reserve_b)
        else:
            self.reserves[pair.lower()] = (reserve_b, reserve_a)

    def __call__(self, address: str, data: bytes) -> bytes:
        selector, body = data[:4], data[4:]
        if same_address(address, V3_QUOTER) and selector == QUOTE_EXACT_INPUT_SINGLE:
            _, _, fee, _, _ = decode(["address", "address", "uint24", "uint256", "uint160"], body)
            outcome = self.v3_outputs.get(fee)
            if outcome is None:
                raise ContractReverted("execution reverted: no pool")
            if isinstance(outcome, Exception):
                raise outcome
            return encode(["uint256"], [outcome])
        if same_address(address, V2_FACTORY) and selector == GET_PAIR:
            token_a, token_b = decode(["address", "address"], body)
            pair = self.pairs.get(frozenset({token_a.lower(), token_b.lower()}), ZERO_ADDRESS)
            return encode(["address"], [pair])
        if selector == GET_RESERVES and address.lower() in self.reserves:
            reserve0, reserve1 = self.reserves[address.lower()]
            return encode(["uint112", "uint112", "uint32"], [reserve0, reserve1, 0])
        raise ContractReverted("execution reverted")


class FakeChainClient(ChainClient):
    name = "fake-chain"

    def __init__(self, contracts: Optional[Callable[[str, bytes], bytes]] = None):
        self.native_balances: Dict[str, Outcome] = {}
        self.token_balances: Dict[Tuple[str, str], Outcome] = {}
        self.metadata: Dict[str, Union[TokenMetadata, Exception]] = {}
        self.contracts = contracts
        self.gas: Outcome = 150_000
        self.gas_price: int = 20 * 10**9
        self.estimated_calls: List[Dict[str, str]] = []

    async def get_native_balance(self, address: str) -> int:
        value = self.native_balances.get(address.lower(), 0)
        if isinstance(value, Exception):
            raise value
        return value

    async def get_token_balance(self, address: str, token: str) -> int:
        value = self.token_balances.get((address.lower(), token.lower()), 0)
        if isinstance(value, Exception):
            raise value
        return value

    async def get_token_metadata(self, token: str) -> TokenMetadata:
        value = self.metadata.get(token.lower())
        if value is None:
            raise ContractReverted("execution reverted")
        if isinstance(value, Exception):
            raise value
        return value

    async def call_contract(self, address: str, data: bytes) -> bytes:
        if self.contracts is None:
            raise ContractReverted("execution reverted")
        return self.contracts(address, data)

    async def estimate_gas(self, call: Dict[str, str]) -> int:
        self.estimated_calls.append(call)
        if isinstance(self.gas, Exception):
            raise self.gas
        return self.gas

    async def get_gas_price(self) -> int:
        return self.gas_price


class FakePriceProvider(PriceProvider):
    name = "fake-prices"

    def __init__(self):
        self.prices: Dict[str, Union[Decimal, Exception]] = {}

    async def get_token_price(self, token_address: str) -> Decimal:
        value = self.prices.get(token_address.lower())
        if value is None:
            raise TokenNotFound(token_address, "no listed USD price")
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        alchemy_api_key="test-key",
        private_key="0x" + "11" * 32,
    )


@pytest.fixture
def uniswap():
    return FakeUniswap()


@pytest.fixture
def chain(uniswap):
    return FakeChainClient(contracts=uniswap)


@pytest.fixture
def prices():
    return FakePriceProvider()


@pytest.fixture
def wallet_tools(chain, prices):
    return WalletTools(
        chain=chain,
        price_provider=prices,
        metadata=TokenMetadataResolver(chain, KNOWN_TOKENS),
        router=QuoteRouter.uniswap(chain),
        gas=GasEstimator(chain, fallback_gas_units=200_000),
    )
