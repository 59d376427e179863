"""Helpers for parsing and normalizing Ethereum addresses."""

from __future__ import annotations

import re

from eth_utils import is_checksum_address, to_checksum_address

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_evm_address(value: str) -> bool:
    return bool(value) and bool(_EVM_ADDRESS_RE.match(value))


def parse_address(value: str) -> str:
    """Validate ``value`` and return its EIP-55 checksummed form.

    All-lowercase and all-uppercase hex are accepted as unchecksummed input;
    mixed case must carry a valid checksum.

    Raises:
        ValueError: with a human-readable reason.
    """

    if not isinstance(value, str):
        raise ValueError("address must be a string")
    candidate = value.strip()
    if not candidate:
        raise ValueError("address cannot be empty")
    if not is_evm_address(candidate):
        raise ValueError(f"not a 20-byte hex address: {candidate}")

    body = candidate[2:]
    if body != body.lower() and body != body.upper() and not is_checksum_address(candidate):
        raise ValueError(f"checksum mismatch: {candidate}")
    return to_checksum_address(candidate)


def same_address(left: str, right: str) -> bool:
    """Case-insensitive address equality."""

    return left.lower() == right.lower()


def sort_pair(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two token addresses the way Uniswap pools do (token0 < token1)."""

    if int(token_a, 16) < int(token_b, 16):
        return token_a, token_b
    return token_b, token_a


__all__ = [
    "ZERO_ADDRESS",
    "is_evm_address",
    "parse_address",
    "same_address",
    "sort_pair",
]
