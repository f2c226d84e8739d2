"""HTTP Proof of Reserve client."""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from bskt.errors import POREligibilityError
from bskt.por.base import PORClient, ReserveAttestation

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1"}


def _first(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _parse_timestamp(value: Any) -> datetime:
    """ISO-8601 string or epoch seconds to an aware UTC datetime."""
    if isinstance(value, bool):
        raise ValueError(f"Unsupported timestamp: {value!r}")
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        if isinstance(value, str):
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    except (OverflowError, OSError) as e:
        raise ValueError(f"Timestamp out of range: {value!r}") from e
    raise ValueError(f"Unsupported timestamp: {value!r}")


def _parse_verified(value: Any) -> bool:
    """Only True, 1, "true" or "1" count as verified."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, int):
        return value == 1
    return False


def parse_attestation(data: Any, source: Optional[str] = None) -> ReserveAttestation:
    """Build an attestation from an oracle payload.

    Accepts snake_case or camelCase keys. `verified` defaults to False.

    Raises:
        ValueError: If the payload is not an object, or the balance or the
            timestamp is missing or malformed
    """
    if not isinstance(data, dict):
        raise ValueError(f"Attestation must be a JSON object, got {type(data).__name__}")

    balance = _first(data, "reserve_balance", "reserveBalance", "reserve")
    verified_at = _first(data, "last_verified", "lastVerified", "timestamp")
    if balance is None or verified_at is None:
        raise ValueError("Attestation must carry a reserve balance and a verification time")

    try:
        reserve_balance = Decimal(str(balance))
    except InvalidOperation as e:
        raise ValueError(f"Invalid reserve balance: {balance!r}") from e
    if not reserve_balance.is_finite():
        raise ValueError(f"Invalid reserve balance: {balance!r}")

    return ReserveAttestation(
        reserve_balance=reserve_balance,
        last_verified=_parse_timestamp(verified_at),
        verified=_parse_verified(data.get("verified", False)),
        source=source,
    )


class HttpPORClient(PORClient):
    """Fetches attestations with a GET on the oracle URL."""

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            api_url: Oracle endpoint returning the attestation JSON
            timeout: Request timeout in seconds
            transport: Optional httpx transport override
        """
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return "http"

    async def fetch_attestation(self) -> ReserveAttestation:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    self.api_url,
                    headers={"Accept": "application/json"},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                return parse_attestation(response.json(), source=self.api_url)
        except (httpx.HTTPError, ValueError, ArithmeticError) as e:
            logger.warning(f"POR oracle request failed: {e}")
            raise POREligibilityError(
                POREligibilityError.UNAVAILABLE, f"POR oracle unavailable: {e}"
            ) from e
