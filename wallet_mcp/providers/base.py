from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict

from ..core.metadata import TokenMetadata


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 10

    async def aclose(self) -> None:
        """Release pooled connections."""
        return None


class ChainClient(Provider):
    """
    Read-only facade over an Ethereum node.

    Every call is time-bounded and retried at most once on a transient
    transport failure. Failures surface as ``ChainUnavailable``; EVM reverts
    surface as ``ContractReverted`` and are never retried. Implementations
    must be safe for concurrent use by many in-flight requests.
    """

    @abstractmethod
    async def get_native_balance(self, address: str) -> int:
        """ETH balance in wei"""
        pass

    @abstractmethod
    async def get_token_balance(self, address: str, token: str) -> int:
        """ERC-20 ``balanceOf`` in base units"""
        pass

    @abstractmethod
    async def get_token_metadata(self, token: str) -> TokenMetadata:
        """On-chain ``name``/``symbol``/``decimals``"""
        pass

    @abstractmethod
    async def call_contract(self, address: str, data: bytes) -> bytes:
        """``eth_call`` against the latest block"""
        pass

    @abstractmethod
    async def estimate_gas(self, call: Dict[str, str]) -> int:
        """``eth_estimateGas`` for an unsigned call object"""
        pass

    @abstractmethod
    async def get_gas_price(self) -> int:
        """Current gas price in wei"""
        pass


class PriceProvider(Provider):
    """Single upstream source of USD token prices"""

    @abstractmethod
    async def get_token_price(self, token_address: str) -> Decimal:
        """
        Price of one token in USD.

        Raises ``TokenNotFound`` when the source lists no price for the address
        and ``UpstreamUnavailable`` on network, timeout or rate-limit failures.
        """
        pass
