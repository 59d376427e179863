from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.amounts import Amount


class SwapRoute(str, Enum):
    V3 = "V3"
    V2 = "V2"


class AmountView(BaseModel):
    raw: str = Field(description="Amount in base units (authoritative)")
    formatted: str = Field(description="Human readable amount derived from raw and decimals")
    decimals: int = Field(description="Decimals used to render the amount")

    @classmethod
    def from_amount(cls, amount: Amount) -> "AmountView":
        return cls(**amount.to_dict())


class TokenInfo(BaseModel):
    address: str = Field(description="Checksummed token contract address")
    symbol: str = Field(description="Token symbol (e.g. USDC)")
    name: str = Field(description="Full token name")
    decimals: int = Field(description="Token decimal places")
    source: str = Field(description="Where the metadata came from: chain, token_list or default")


class TokenBalance(BaseModel):
    token: TokenInfo
    balance: AmountView


class BalanceResult(BaseModel):
    address: str = Field(description="Wallet address")
    eth_balance: AmountView = Field(description="Native ETH balance")
    tokens: List[TokenBalance] = Field(default_factory=list, description="Requested ERC-20 balances")
    warnings: List[str] = Field(default_factory=list, description="Non-fatal problems reading balances")


class PriceResult(BaseModel):
    token_address: str = Field(description="Token contract address")
    symbol: str = Field(description="Token symbol")
    price_usd: Decimal = Field(description="Price per token in USD")
    source: str = Field(description="Upstream price source")


class SwapQuote(BaseModel):
    from_token: TokenInfo
    to_token: TokenInfo
    amount_in: AmountView
    amount_out: AmountView = Field(description="Expected output at current pool state")
    minimum_amount_out: AmountView = Field(description="Output floor implied by the slippage tolerance")
    route: SwapRoute
    fee_tier: Optional[int] = Field(default=None, description="Pool fee in hundredths of a bip (V3 only)")
    gas_estimate: int = Field(description="Gas units for the swap")
    gas_estimate_source: str = Field(description="'node' when eth_estimateGas succeeded, else 'fallback'")
    gas_price: AmountView = Field(description="Gas price in wei")
    total_cost: AmountView = Field(description="gas_estimate * gas_price, in wei")
    slippage_tolerance: Decimal = Field(description="Slippage tolerance percentage")
