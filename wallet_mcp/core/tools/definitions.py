from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ToolName(str, Enum):
    """The closed set of tools this server exposes."""
    GET_BALANCE = "get_balance"
    GET_TOKEN_PRICE = "get_token_price"
    SWAP_TOKENS = "swap_tokens"


class ParameterKind(str, Enum):
    """Argument kinds understood by the schema validator"""
    ADDRESS = "address"
    DECIMAL = "decimal"


class ToolParameter(BaseModel):
    """Definition of a single tool parameter"""
    name: str
    kind: ParameterKind
    description: str
    required: bool = True
    default: Optional[Decimal] = None

    def to_json_schema(self) -> Dict[str, Any]:
        prop: Dict[str, Any] = {"type": "string", "description": self.description}
        if self.kind == ParameterKind.ADDRESS:
            prop["pattern"] = "^0x[a-fA-F0-9]{40}$"
        if self.default is not None:
            prop["default"] = str(self.default)
        return prop


class ToolDefinition(BaseModel):
    """Definition of a tool, as advertised by tools/list"""
    name: ToolName
    description: str
    parameters: List[ToolParameter] = Field(default_factory=list)

    def to_mcp_format(self) -> Dict[str, Any]:
        """Convert to the MCP tool schema format"""
        return {
            "name": self.name.value,
            "description": self.description,
            "inputSchema": {
                "type": "object",
                "properties": {param.name: param.to_json_schema() for param in self.parameters},
                "required": [param.name for param in self.parameters if param.required],
            },
        }


def build_definitions(default_slippage: Decimal) -> Dict[ToolName, ToolDefinition]:
    """Schemas for the three wallet tools."""
    return {
        ToolName.GET_BALANCE: ToolDefinition(
            name=ToolName.GET_BALANCE,
            description=(
                "Get the ETH balance of a wallet address and, optionally, its balance "
                "of one ERC-20 token with the token's symbol, name and decimals."
            ),
            parameters=[
                ToolParameter(
                    name="address",
                    kind=ParameterKind.ADDRESS,
                    description="Wallet address to query",
                ),
                ToolParameter(
                    name="token_address",
                    kind=ParameterKind.ADDRESS,
                    description="Optional ERC-20 token contract address",
                    required=False,
                ),
            ],
        ),
        ToolName.GET_TOKEN_PRICE: ToolDefinition(
            name=ToolName.GET_TOKEN_PRICE,
            description="Get the current USD price of an ERC-20 token by contract address.",
            parameters=[
                ToolParameter(
                    name="token_address",
                    kind=ParameterKind.ADDRESS,
                    description="Token contract address",
                ),
            ],
        ),
        ToolName.SWAP_TOKENS: ToolDefinition(
            name=ToolName.SWAP_TOKENS,
            description=(
                "Simulate an exact-input token swap on Uniswap (V3, falling back to V2) "
                "and return the expected output, the slippage-bounded minimum output "
                "and the estimated gas cost. Nothing is signed or broadcast."
            ),
            parameters=[
                ToolParameter(
                    name="from_token",
                    kind=ParameterKind.ADDRESS,
                    description="Source token contract address",
                ),
                ToolParameter(
                    name="to_token",
                    kind=ParameterKind.ADDRESS,
                    description="Destination token contract address",
                ),
                ToolParameter(
                    name="amount",
                    kind=ParameterKind.DECIMAL,
                    description="Amount of the source token to swap, as a decimal string",
                ),
                ToolParameter(
                    name="slippage_tolerance",
                    kind=ParameterKind.DECIMAL,
                    description=f"Slippage tolerance percentage in (0, 100] (default: {default_slippage})",
                    required=False,
                    default=default_slippage,
                ),
            ],
        ),
    }
