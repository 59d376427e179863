import asyncio
import json

import httpx
import pytest
from eth_abi import encode

from wallet_mcp.core.errors import ChainUnavailable, ContractReverted
from wallet_mcp.providers.alchemy import BALANCE_OF, DECIMALS, NAME, SYMBOL, AlchemyProvider

from conftest import USDC, VITALIK

RPC_URL = "https://eth-mainnet.example/v2/test"


def rpc_result(request: httpx.Request, result) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def rpc_error(request: httpx.Request, code: int, message: str) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(
        200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": code, "message": message}}
    )


def make_provider(handler) -> AlchemyProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AlchemyProvider(RPC_URL, timeout_s=1.0, client=client)


@pytest.mark.asyncio
async def test_native_balance():
    provider = make_provider(lambda request: rpc_result(request, hex(10**18)))
    assert await provider.get_native_balance(VITALIK) == 10**18


@pytest.mark.asyncio
async def test_retries_once_on_transient_status():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            return httpx.Response(503)
        return rpc_result(request, "0x10")

    provider = make_provider(handler)

    assert await provider.get_gas_price() == 16
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_gives_up_after_one_retry():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectTimeout("slow node", request=request)

    provider = make_provider(handler)

    with pytest.raises(ChainUnavailable) as exc_info:
        await provider.get_native_balance(VITALIK)
    assert len(attempts) == 2
    assert exc_info.value.operation == "eth_getBalance"


@pytest.mark.asyncio
async def test_stalled_node_is_bounded_by_overall_deadline():
    attempts = []

    async def handler(request):
        attempts.append(request)
        await asyncio.sleep(5)
        return rpc_result(request, "0x1")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = AlchemyProvider(RPC_URL, timeout_s=0.05, client=client)

    with pytest.raises(ChainUnavailable) as exc_info:
        await provider.get_gas_price()
    assert len(attempts) == 2
    assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_revert_is_not_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        return rpc_error(request, 3, "execution reverted")

    provider = make_provider(handler)

    with pytest.raises(ContractReverted):
        await provider.call_contract(USDC, BALANCE_OF)
    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_node_error_is_chain_unavailable():
    provider = make_provider(lambda request: rpc_error(request, -32000, "header not found"))

    with pytest.raises(ChainUnavailable):
        await provider.get_native_balance(VITALIK)


@pytest.mark.asyncio
async def test_empty_call_result_is_a_revert():
    provider = make_provider(lambda request: rpc_result(request, "0x"))

    with pytest.raises(ContractReverted):
        await provider.get_token_balance(VITALIK, USDC)


@pytest.mark.asyncio
async def test_token_metadata():
    answers = {
        NAME: encode(["string"], ["USD Coin"]),
        SYMBOL: encode(["string"], ["USDC"]),
        DECIMALS: encode(["uint8"], [6]),
    }

    def handler(request):
        call = json.loads(request.content)["params"][0]
        selector = bytes.fromhex(call["data"][2:10])
        return rpc_result(request, "0x" + answers[selector].hex())

    provider = make_provider(handler)
    metadata = await provider.get_token_metadata(USDC)

    assert (metadata.symbol, metadata.name, metadata.decimals) == ("USDC", "USD Coin", 6)
    assert metadata.source == "chain"


@pytest.mark.asyncio
async def test_bytes32_symbol():
    answers = {
        NAME: b"Maker".ljust(32, b"\x00"),
        SYMBOL: b"MKR".ljust(32, b"\x00"),
        DECIMALS: encode(["uint8"], [18]),
    }

    def handler(request):
        call = json.loads(request.content)["params"][0]
        return rpc_result(request, "0x" + answers[bytes.fromhex(call["data"][2:10])].hex())

    metadata = await make_provider(handler).get_token_metadata(USDC)

    assert metadata.symbol == "MKR"
    assert metadata.name == "Maker"

