import json
from decimal import Decimal

import pytest

from wallet_mcp.server import MCP_PROTOCOL_VERSION, MCPServer

from conftest import UNLISTED_TOKEN, USDC, USDT, VITALIK


@pytest.fixture
def server(chain, prices, test_settings):
    return MCPServer.build(chain, prices, test_settings)


def call(name, arguments, request_id=1):
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }


@pytest.mark.asyncio
async def test_initialize(server):
    response = await server.handle_payload({"jsonrpc": "2.0", "id": 0, "method": "initialize", "params": {}})

    assert response["result"]["protocolVersion"] == MCP_PROTOCOL_VERSION
    assert "tools" in response["result"]["capabilities"]


@pytest.mark.asyncio
async def test_tools_list(server):
    response = await server.handle_payload({"jsonrpc": "2.0", "id": "a", "method": "tools/list"})

    names = [tool["name"] for tool in response["result"]["tools"]]
    assert names == ["get_balance", "get_token_price", "swap_tokens"]
    assert response["id"] == "a"
    assert "error" not in response


@pytest.mark.asyncio
async def test_tools_call_success_envelope(server, chain):
    chain.native_balances[VITALIK.lower()] = 10**18

    response = await server.handle_payload(call("get_balance", {"address": VITALIK}))

    result = response["result"]
    assert result["isError"] is False
    assert result["request_id"]
    assert result["structuredContent"]["eth_balance"]["formatted"] == "1"
    assert result["structuredContent"]["tokens"] == []
    assert json.loads(result["content"][0]["text"]) == result["structuredContent"]


@pytest.mark.asyncio
async def test_swap_quote_through_the_envelope(server, uniswap):
    uniswap.v3_outputs = {100: 99_990_000}

    response = await server.handle_payload(
        call("swap_tokens", {"from_token": USDC, "to_token": USDT, "amount": "100", "slippage_tolerance": "1.0"})
    )

    quote = response["result"]["structuredContent"]
    assert quote["amount_in"]["raw"] == str(100 * 10**6)
    assert quote["route"] in ("V3", "V2")
    assert int(quote["amount_out"]["raw"]) > 0
    assert Decimal(quote["slippage_tolerance"]) == Decimal("1.0")


@pytest.mark.asyncio
async def test_tool_error_envelope(server):
    response = await server.handle_payload(call("get_token_price", {"token_address": UNLISTED_TOKEN}, request_id=7))

    assert "result" not in response
    assert response["id"] == 7
    assert response["error"]["code"] == -32001
    assert response["error"]["data"]["kind"] == "TokenNotFound"
    assert response["error"]["data"]["request_id"]


@pytest.mark.asyncio
async def test_unknown_tool_envelope(server):
    response = await server.handle_payload(call("send_transaction", {}))
    assert response["error"]["code"] == -32601
    assert response["error"]["data"]["kind"] == "UnknownTool"


@pytest.mark.asyncio
async def test_unknown_method(server):
    response = await server.handle_payload({"jsonrpc": "2.0", "id": 1, "method": "resources/list"})
    assert response["error"]["code"] == -32601


@pytest.mark.asyncio
async def test_malformed_tools_call_params(server):
    response = await server.handle_payload(
        {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"arguments": {}}}
    )
    assert response["error"]["code"] == -32602


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "message",
    [
        {"jsonrpc": "1.0", "id": 1, "method": "ping"},
        {"jsonrpc": "2.0", "id": 1},
        "ping",
    ],
)
async def test_invalid_requests(server, message):
    response = await server.handle_payload(message)
    assert response["error"]["code"] == -32600


@pytest.mark.asyncio
@pytest.mark.parametrize("request_id", [True, 1.5, {"n": 1}, [1]])
async def test_non_scalar_ids_are_rejected_not_coerced(server, request_id):
    response = await server.handle_payload({"jsonrpc": "2.0", "id": request_id, "method": "ping"})
    assert response["error"]["code"] == -32600
    assert response["id"] is None


@pytest.mark.asyncio
async def test_string_id_is_echoed_verbatim(server):
    response = await server.handle_payload({"jsonrpc": "2.0", "id": "1", "method": "ping"})
    assert response["id"] == "1"
    assert response["result"] == {}


@pytest.mark.asyncio
async def test_notification_gets_no_response(server):
    assert await server.handle_payload({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


@pytest.mark.asyncio
async def test_batch(server):
    responses = await server.handle_payload(
        [
            {"jsonrpc": "2.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            call("get_token_price", {}, request_id=2),
        ]
    )

    assert [response["id"] for response in responses] == [1, 2]
    assert responses[0]["result"] == {}
    assert responses[1]["error"]["data"]["kind"] == "MissingParameter"


@pytest.mark.asyncio
async def test_empty_batch_is_invalid(server):
    response = await server.handle_payload([])
    assert response["error"]["code"] == -32600
