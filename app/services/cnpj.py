"""
CNPJ helpers and ReceitaWS lookup

Validation follows the Receita Federal check-digit algorithm; lookups are
proxied to the public ReceitaWS API.
"""
import re
from typing import Optional

import httpx
from loguru import logger

from app.core.config import settings
from app.core.exceptions import (
    BadRequestException,
    TooManyRequestsException,
    UpstreamException,
)

_NON_DIGITS = re.compile(r"\D")


def clean_cnpj(cnpj: str) -> str:
    return _NON_DIGITS.sub("", cnpj or "")


def format_cnpj(cnpj: str) -> str:
    """00.000.000/0000-00; partial input is formatted as far as it goes"""
    digits = clean_cnpj(cnpj)
    if len(digits) > 14:
        return cnpj[:18]
    out = re.sub(r"(\d{2})(\d)", r"\1.\2", digits, count=1)
    out = re.sub(r"(\d{3})(\d)", r"\1.\2", out, count=1)
    out = re.sub(r"(\d{3})(\d)", r"\1/\2", out, count=1)
    return re.sub(r"(\d{4})(\d)", r"\1-\2", out, count=1)


def _check_digit(digits: str, weights: list) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cnpj(cnpj: str) -> bool:
    digits = clean_cnpj(cnpj)
    if len(digits) != 14:
        return False
    if digits == digits[0] * 14:
        return False

    first = _check_digit(digits[:12], [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2])
    if int(digits[12]) != first:
        return False
    second = _check_digit(digits[:13], [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2])
    return int(digits[13]) == second


class CNPJLookupClient:
    """
    Thin async client for ReceitaWS

    A transport can be injected so tests never leave the process.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.cnpj_api_base_url).rstrip("/")
        self.timeout = timeout or settings.cnpj_timeout
        self.transport = transport

    async def lookup(self, cnpj: str) -> dict:
        digits = clean_cnpj(cnpj)
        if not digits:
            raise BadRequestException("CNPJ is required")
        if len(digits) != 14:
            raise BadRequestException("CNPJ must have 14 digits")

        logger.info("Looking up CNPJ {}", digits)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
                headers={"Accept": "application/json"},
            ) as client:
                response = await client.get(f"/cnpj/{digits}")
        except httpx.HTTPError as e:
            logger.warning("CNPJ lookup failed: {}", e)
            raise UpstreamException("Could not reach the CNPJ service. Try again.")

        if response.status_code == 429:
            raise TooManyRequestsException("Too many requests. Wait a few seconds and try again.")
        if response.status_code >= 400:
            logger.warning("CNPJ service answered {}", response.status_code)
            raise UpstreamException("Error querying CNPJ. Try again.")

        data = response.json()
        # ReceitaWS reports lookup errors with HTTP 200 and status=ERROR
        if isinstance(data, dict) and data.get("status") == "ERROR":
            raise BadRequestException(data.get("message") or "Invalid CNPJ")
        return data


def get_cnpj_client() -> CNPJLookupClient:
    """FastAPI dependency; override in tests"""
    return CNPJLookupClient()
