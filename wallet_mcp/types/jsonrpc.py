from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, StrictInt, StrictStr

JSONRPC_VERSION = "2.0"

# Reserved JSON-RPC 2.0 protocol codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[StrictInt, StrictStr, None]


class JsonRpcRequest(BaseModel):
    jsonrpc: str = Field(description="Protocol version, must be '2.0'")
    method: str = Field(min_length=1)
    id: RequestId = Field(default=None, description="Absent for notifications")
    params: Optional[Union[Dict[str, Any], list]] = None


class ToolCallParams(BaseModel):
    name: str = Field(description="Tool to invoke")
    arguments: Optional[Any] = Field(default=None, description="Untyped tool arguments, validated per tool")


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Optional[Dict[str, Any]] = None


class JsonRpcResponse(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with exactly one of ``result``/``error`` present."""
        payload: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(mode="json", exclude_none=True)
        else:
            payload["result"] = self.result
        return payload

    @classmethod
    def failure(
        cls,
        request_id: RequestId,
        code: int,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> "JsonRpcResponse":
        return cls(id=request_id, error=JsonRpcError(code=code, message=message, data=data))
