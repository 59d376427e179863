import asyncio
import itertools
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from ..core.errors import ChainUnavailable, ContractReverted, TokenNotFound, UpstreamUnavailable
from ..core.metadata import TokenMetadata
from .base import ChainClient, PriceProvider

logger = structlog.stdlib.get_logger(__name__)

BALANCE_OF = function_signature_to_4byte_selector("balanceOf(address)")
NAME = function_signature_to_4byte_selector("name()")
SYMBOL = function_signature_to_4byte_selector("symbol()")
DECIMALS = function_signature_to_4byte_selector("decimals()")

# Statuses worth a single retry; everything else is answered immediately.
_TRANSIENT_STATUSES = frozenset({429, 502, 503, 504})


def _is_revert(error: Dict[str, Any]) -> bool:
    # Geth-style nodes use code 3 for reverts; others only say so in the message.
    message = str(error.get("message", "")).lower()
    return error.get("code") == 3 or "revert" in message


def _decode_text(raw: bytes) -> str:
    """Decode an ERC-20 string return, tolerating legacy bytes32 tokens (e.g. MKR)."""
    if len(raw) == 32:
        return raw.rstrip(b"\x00").decode("utf-8", errors="replace")
    try:
        (value,) = decode(["string"], raw)
    except DecodingError as exc:
        raise ValueError(f"undecodable string return: {exc}") from exc
    return value.strip("\x00").strip()


def _decode_uint(raw: bytes) -> int:
    try:
        (value,) = decode(["uint256"], raw)
    except DecodingError as exc:
        raise ValueError(f"undecodable uint256 return: {exc}") from exc
    return value


class AlchemyProvider(ChainClient):
    """Ethereum JSON-RPC client (Alchemy or any compatible node) over a pooled httpx client"""

    name = "alchemy"

    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 10.0,
        max_connections: int = 20,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.timeout_s = timeout_s
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_s),
            limits=httpx.Limits(max_connections=max_connections),
            headers={"Content-Type": "application/json"},
        )
        self._ids = itertools.count(1)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _rpc(self, method: str, params: List[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": next(self._ids)}
        last_failure = "unknown failure"

        for attempt in range(2):
            try:
                response = await asyncio.wait_for(
                    self._client.post(self.rpc_url, json=payload, timeout=self.timeout_s), self.timeout_s
                )
            except (httpx.TimeoutException, asyncio.TimeoutError):
                last_failure = f"timed out after {self.timeout_s}s"
            except httpx.TransportError as exc:
                last_failure = f"transport error: {exc.__class__.__name__}"
            else:
                if response.status_code in _TRANSIENT_STATUSES:
                    last_failure = f"HTTP {response.status_code}"
                else:
                    return self._unwrap(method, response)

            logger.warning("chain_call_failed", rpc_method=method, attempt=attempt + 1, reason=last_failure)

        raise ChainUnavailable(f"{method} failed after retry: {last_failure}", operation=method)

    def _unwrap(self, method: str, response: httpx.Response) -> Any:
        if response.status_code >= 400:
            raise ChainUnavailable(f"{method} rejected with HTTP {response.status_code}", operation=method)
        try:
            data = response.json()
        except ValueError:
            raise ChainUnavailable(f"{method} returned malformed JSON", operation=method) from None

        error = data.get("error")
        if error:
            if _is_revert(error):
                raise ContractReverted(str(error.get("message", "execution reverted")), error.get("data"))
            raise ChainUnavailable(f"{method} node error: {error.get('message', error)}", operation=method)
        if "result" not in data:
            raise ChainUnavailable(f"{method} returned no result", operation=method)
        return data["result"]

    async def get_native_balance(self, address: str) -> int:
        result = await self._rpc("eth_getBalance", [address, "latest"])
        return int(result, 16)

    async def get_token_balance(self, address: str, token: str) -> int:
        raw = await self.call_contract(token, BALANCE_OF + encode(["address"], [address]))
        return _decode_uint(raw)

    async def get_token_metadata(self, token: str) -> TokenMetadata:
        name_raw, symbol_raw, decimals_raw = await asyncio.gather(
            self.call_contract(token, NAME),
            self.call_contract(token, SYMBOL),
            self.call_contract(token, DECIMALS),
        )
        decimals = _decode_uint(decimals_raw)
        if decimals > 255:
            raise ValueError(f"decimals out of range: {decimals}")
        symbol = _decode_text(symbol_raw)
        if not symbol:
            raise ValueError("empty symbol")
        return TokenMetadata(
            address=token,
            symbol=symbol,
            name=_decode_text(name_raw) or symbol,
            decimals=decimals,
            source="chain",
        )

    async def call_contract(self, address: str, data: bytes) -> bytes:
        result = await self._rpc("eth_call", [{"to": address, "data": "0x" + data.hex()}, "latest"])
        raw = bytes.fromhex(result[2:] if result.startswith("0x") else result)
        if not raw:
            # No code at the address, or a function that returned nothing.
            raise ContractReverted("empty return data")
        return raw

    async def estimate_gas(self, call: Dict[str, str]) -> int:
        result = await self._rpc("eth_estimateGas", [call])
        return int(result, 16)

    async def get_gas_price(self) -> int:
        result = await self._rpc("eth_gasPrice", [])
        return int(result, 16)


class AlchemyPriceProvider(PriceProvider):
    """Alchemy Prices API (token prices by contract address)"""

    name = "alchemy"

    def __init__(
        self,
        api_key: str,
        timeout_s: float = 10.0,
        network: str = "eth-mainnet",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.network = network
        self.timeout_s = timeout_s
        self.base_url = f"https://api.g.alchemy.com/prices/v1/{api_key}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_s))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_token_price(self, token_address: str) -> Decimal:
        payload = {"addresses": [{"network": self.network, "address": token_address}]}
        try:
            response = await self._client.post(
                f"{self.base_url}/tokens/by-address",
                json=payload,
                timeout=self.timeout_s,
            )
        except httpx.TimeoutException:
            raise UpstreamUnavailable("Alchemy price request timed out", provider=self.name) from None
        except httpx.TransportError as exc:
            raise UpstreamUnavailable(f"Alchemy price request failed: {exc.__class__.__name__}", provider=self.name) from None

        if response.status_code == 429:
            raise UpstreamUnavailable("Alchemy price API rate limit exceeded", provider=self.name)
        if response.status_code >= 400:
            raise UpstreamUnavailable(f"Alchemy price API returned status {response.status_code}", provider=self.name)

        try:
            data = response.json()
        except ValueError:
            raise UpstreamUnavailable("Alchemy price API returned malformed JSON", provider=self.name) from None

        return self._extract_usd(token_address, data.get("data") or [])

    def _extract_usd(self, token_address: str, entries: Sequence[Dict[str, Any]]) -> Decimal:
        for entry in entries:
            for price in entry.get("prices") or []:
                if str(price.get("currency", "")).lower() != "usd":
                    continue
                try:
                    return Decimal(str(price["value"]))
                except (KeyError, InvalidOperation):
                    raise UpstreamUnavailable("Alchemy price API returned an unparseable price", provider=self.name) from None
        raise TokenNotFound(token_address, "no listed USD price")
