import re

from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

_PRIVATE_KEY_RE = re.compile(r"^(0x)?[a-fA-F0-9]{64}$")


class ConfigurationError(RuntimeError):
    """Raised at startup when the process cannot be configured to serve."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=3000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="json",
        description="Log renderer: 'json' lines or 'console' for local development",
    )

    # Chain access
    alchemy_api_key: str = Field(default="", description="Alchemy API key (node and prices)")
    eth_rpc_url: str = Field(
        default="",
        description="Explicit Ethereum JSON-RPC endpoint; overrides the Alchemy-derived URL",
    )
    private_key: str = Field(
        default="",
        description="Wallet key. Validated at startup, never used for signing",
    )
    chain_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single outbound chain call",
    )
    max_connections: int = Field(
        default=20,
        ge=1,
        description="Connection pool size shared by all in-flight requests",
    )

    # Prices
    price_provider: str = Field(
        default="alchemy",
        description="Upstream price source: 'alchemy' or 'coingecko'",
    )
    coingecko_api_key: str = Field(default="", description="Coingecko API key")
    price_timeout_seconds: float = Field(default=10.0, gt=0, description="Price request timeout")

    # Swap simulation
    default_slippage_tolerance: Decimal = Field(
        default=Decimal("0.5"),
        gt=0,
        le=100,
        description="Slippage percentage used when a swap request omits it",
    )
    fallback_gas_units: int = Field(
        default=200_000,
        ge=21_000,
        description="Gas units reported when eth_estimateGas cannot simulate the swap",
    )

    @field_validator("price_provider", mode="before")
    @classmethod
    def _normalize_price_provider(cls, value: Any) -> str:
        return str(value or "alchemy").strip().lower()

    @property
    def rpc_url(self) -> str:
        """Node endpoint, preferring an explicit URL over the Alchemy default."""
        if self.eth_rpc_url:
            return self.eth_rpc_url
        if self.alchemy_api_key:
            return f"https://eth-mainnet.g.alchemy.com/v2/{self.alchemy_api_key}"
        return ""

    def validate_startup(self) -> None:
        """Fail fast on configuration the server cannot run with."""
        rpc_url = self.rpc_url
        if not rpc_url:
            raise ConfigurationError("Set ETH_RPC_URL or ALCHEMY_API_KEY to reach an Ethereum node")
        if not rpc_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid RPC URL format: {rpc_url}")
        if not self.private_key:
            raise ConfigurationError("PRIVATE_KEY environment variable is required")
        if not _PRIVATE_KEY_RE.match(self.private_key):
            raise ConfigurationError("PRIVATE_KEY must be 32 bytes of hex")
        if self.price_provider not in ("alchemy", "coingecko"):
            raise ConfigurationError(f"Unsupported PRICE_PROVIDER '{self.price_provider}'")
        if self.price_provider == "alchemy" and not self.alchemy_api_key:
            raise ConfigurationError("PRICE_PROVIDER=alchemy requires ALCHEMY_API_KEY")


# Global settings instance
settings = Settings()
