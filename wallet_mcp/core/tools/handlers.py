"""Handlers for the three wallet tools."""

from __future__ import annotations

import asyncio
from typing import List

import structlog

from ...providers.base import ChainClient, PriceProvider
from ...types.results import (
    AmountView,
    BalanceResult,
    PriceResult,
    SwapQuote,
    TokenBalance,
    TokenInfo,
)
from ..amounts import Amount
from ..errors import ContractReverted, InvalidParameter
from ..metadata import TokenMetadata, TokenMetadataResolver
from ..swap.router import GasEstimator, QuoteRouter, minimum_output
from .arguments import GetBalanceArgs, GetTokenPriceArgs, SwapTokensArgs

logger = structlog.stdlib.get_logger(__name__)

NATIVE_DECIMALS = 18


def _token_info(metadata: TokenMetadata) -> TokenInfo:
    return TokenInfo(
        address=metadata.address,
        symbol=metadata.symbol,
        name=metadata.name,
        decimals=metadata.decimals,
        source=metadata.source,
    )


class WalletTools:
    """
    Tool handlers over the chain client, price source and quote router.

    Holds no per-request state; one instance serves all concurrent calls.
    """

    def __init__(
        self,
        chain: ChainClient,
        price_provider: PriceProvider,
        metadata: TokenMetadataResolver,
        router: QuoteRouter,
        gas: GasEstimator,
    ):
        self.chain = chain
        self.price_provider = price_provider
        self.metadata = metadata
        self.router = router
        self.gas = gas

    async def get_balance(self, args: GetBalanceArgs) -> BalanceResult:
        if args.token_address is None:
            wei = await self.chain.get_native_balance(args.address)
            return BalanceResult(
                address=args.address,
                eth_balance=AmountView.from_amount(Amount(wei, NATIVE_DECIMALS)),
            )

        wei, token_balance, token_meta = await asyncio.gather(
            self.chain.get_native_balance(args.address),
            self._read_token_balance(args.address, args.token_address),
            self.metadata.resolve(args.token_address),
        )
        raw, warnings = token_balance
        logger.info(
            "balance_fetched",
            token_address=args.token_address,
            symbol=token_meta.symbol,
            metadata_source=token_meta.source,
        )
        return BalanceResult(
            address=args.address,
            eth_balance=AmountView.from_amount(Amount(wei, NATIVE_DECIMALS)),
            tokens=[
                TokenBalance(
                    token=_token_info(token_meta),
                    balance=AmountView.from_amount(Amount(raw, token_meta.decimals)),
                )
            ],
            warnings=warnings,
        )

    async def _read_token_balance(self, address: str, token_address: str) -> tuple[int, List[str]]:
        try:
            return await self.chain.get_token_balance(address, token_address), []
        except (ContractReverted, ValueError) as exc:
            # Not an ERC-20 (or no code at all): the wallet holds none of it.
            logger.warning("token_balance_unreadable", token_address=token_address, error=str(exc))
            return 0, [f"balanceOf unavailable for {token_address}; reported as 0"]

    async def get_token_price(self, args: GetTokenPriceArgs) -> PriceResult:
        price_usd, token_meta = await asyncio.gather(
            self.price_provider.get_token_price(args.token_address),
            self.metadata.resolve(args.token_address),
        )
        return PriceResult(
            token_address=args.token_address,
            symbol=token_meta.symbol,
            price_usd=price_usd,
            source=self.price_provider.name,
        )

    async def swap_tokens(self, args: SwapTokensArgs) -> SwapQuote:
        from_meta, to_meta = await asyncio.gather(
            self.metadata.resolve_strict(args.from_token),
            self.metadata.resolve_strict(args.to_token),
        )

        try:
            amount_in = Amount.from_decimal(args.amount, from_meta.decimals)
        except ValueError as exc:
            raise InvalidParameter("amount", f"{exc} for {from_meta.symbol}") from None

        (strategy, quote), gas_price = await asyncio.gather(
            self.router.best_quote(args.from_token, args.to_token, amount_in.raw),
            self.chain.get_gas_price(),
        )

        minimum_out = minimum_output(quote.amount_out, args.slippage_tolerance)
        call = strategy.swap_call(args.from_token, args.to_token, amount_in.raw, quote, minimum_out)
        gas_units, gas_source = await self.gas.estimate(call)

        return SwapQuote(
            from_token=_token_info(from_meta),
            to_token=_token_info(to_meta),
            amount_in=AmountView.from_amount(amount_in),
            amount_out=AmountView.from_amount(Amount(quote.amount_out, to_meta.decimals)),
            minimum_amount_out=AmountView.from_amount(Amount(minimum_out, to_meta.decimals)),
            route=quote.route,
            fee_tier=quote.fee_tier,
            gas_estimate=gas_units,
            gas_estimate_source=gas_source,
            gas_price=AmountView.from_amount(Amount(gas_price, NATIVE_DECIMALS)),
            total_cost=AmountView.from_amount(Amount(gas_units * gas_price, NATIVE_DECIMALS)),
            slippage_tolerance=args.slippage_tolerance,
        )
