"""
CNPJ validation, formatting and the ReceitaWS client
"""
import httpx
import pytest

from app.core.exceptions import (
    BadRequestException,
    TooManyRequestsException,
    UpstreamException,
)
from app.services.cnpj import CNPJLookupClient, clean_cnpj, format_cnpj, validate_cnpj


def test_validate_cnpj():
    assert validate_cnpj("11222333000181")
    assert validate_cnpj("11.222.333/0001-81")
    assert not validate_cnpj("11222333000182")
    assert not validate_cnpj("11111111111111")
    assert not validate_cnpj("1122233300018")
    assert not validate_cnpj("")


def test_format_cnpj():
    assert clean_cnpj("11.222.333/0001-81") == "11222333000181"
    assert format_cnpj("11222333000181") == "11.222.333/0001-81"
    assert format_cnpj("11222") == "11.222"


def _client(handler) -> CNPJLookupClient:
    return CNPJLookupClient(base_url="https://cnpj.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_lookup_returns_payload():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/cnpj/11222333000181"
        return httpx.Response(200, json={"status": "OK", "nome": "ACME LTDA"})

    data = await _client(handler).lookup("11.222.333/0001-81")
    assert data["nome"] == "ACME LTDA"


@pytest.mark.asyncio
async def test_lookup_rejects_short_cnpj():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("should not be called")

    with pytest.raises(BadRequestException):
        await _client(handler).lookup("123")


@pytest.mark.asyncio
async def test_lookup_maps_upstream_errors():
    with pytest.raises(TooManyRequestsException):
        await _client(lambda r: httpx.Response(429)).lookup("11222333000181")
    with pytest.raises(UpstreamException):
        await _client(lambda r: httpx.Response(500)).lookup("11222333000181")
    with pytest.raises(BadRequestException):
        await _client(
            lambda r: httpx.Response(200, json={"status": "ERROR", "message": "CNPJ inválido"})
        ).lookup("11222333000181")


@pytest.mark.asyncio
async def test_lookup_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(UpstreamException):
        await _client(handler).lookup("11222333000181")
