import json

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from ..server import MCPServer
from ..types.jsonrpc import PARSE_ERROR, JsonRpcResponse

router = APIRouter()


def get_server(request: Request) -> MCPServer:
    return request.app.state.mcp_server


@router.post("/mcp")
async def handle_mcp(request: Request) -> Response:
    """JSON-RPC 2.0 endpoint: single messages and batches."""
    body = await request.body()
    try:
        payload = json.loads(body)
    except ValueError:
        # UnicodeDecodeError is a ValueError too
        error = JsonRpcResponse.failure(None, PARSE_ERROR, "Parse error: body is not valid JSON")
        return JSONResponse(error.to_wire())

    result = await get_server(request).handle_payload(payload)
    if result is None:
        return Response(status_code=204)
    return JSONResponse(result)
