"""Uniswap deployment addresses and quoting parameters (Ethereum mainnet)."""

from __future__ import annotations

from typing import Tuple

# Uniswap V3
V3_QUOTER = "0xb27308f9F90D607463bb33eA1BeBb41C27CE5AB6"
V3_SWAP_ROUTER = "0xE592427A0AEce92De3Edee1F18E0157C05861564"
# Pool fees in hundredths of a bip: 0.01%, 0.05%, 0.3%, 1%
V3_FEE_TIERS: Tuple[int, ...] = (100, 500, 3000, 10000)

# Uniswap V2
V2_FACTORY = "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"
V2_ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
# 0.3% protocol fee expressed in basis points
V2_FEE_BPS = 30

# Unsigned simulation calls are sent from this placeholder; nothing is ever signed.
SIMULATION_SENDER = "0x0000000000000000000000000000000000000001"
SWAP_DEADLINE_SECONDS = 3600
