from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

import httpx

from ..core.errors import TokenNotFound, UpstreamUnavailable
from .base import PriceProvider


class CoingeckoProvider(PriceProvider):
    """Coingecko API provider for token prices"""

    name = "coingecko"
    timeout_s = 15

    def __init__(
        self,
        api_key: str = "",
        timeout_s: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.timeout_s = timeout_s
        self.base_url = "https://api.coingecko.com/api/v3"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_s))

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_token_price(self, token_address: str) -> Decimal:
        """Get the USD price of an Ethereum token by contract address"""
        params = {
            "contract_addresses": token_address,
            "vs_currencies": "usd",
            "include_market_cap": "false",
            "include_24hr_vol": "false",
            "include_24hr_change": "false",
        }

        try:
            response = await self._client.get(
                f"{self.base_url}/simple/token_price/ethereum",
                headers=self._build_headers(),
                params=params,
                timeout=self.timeout_s,
            )
        except httpx.TimeoutException:
            raise UpstreamUnavailable("Coingecko request timed out", provider=self.name) from None
        except httpx.TransportError as exc:
            raise UpstreamUnavailable(f"Coingecko request failed: {exc.__class__.__name__}", provider=self.name) from None

        if response.status_code == 429:
            raise UpstreamUnavailable("Coingecko rate limit exceeded", provider=self.name)
        if response.status_code >= 400:
            raise UpstreamUnavailable(f"Coingecko returned status {response.status_code}", provider=self.name)

        try:
            data = response.json()
        except ValueError:
            raise UpstreamUnavailable("Coingecko returned malformed JSON", provider=self.name) from None

        # Keys come back lowercased; unlisted tokens are simply absent.
        price_data = data.get(token_address.lower()) or {}
        if "usd" not in price_data:
            raise TokenNotFound(token_address, "no listed USD price")
        try:
            return Decimal(str(price_data["usd"]))
        except InvalidOperation:
            raise UpstreamUnavailable("Coingecko returned an unparseable price", provider=self.name) from None
