"""Relayer submission client."""

import logging
from typing import Optional

import httpx

from bskt.errors import SubmissionError
from bskt.submission.base import SubmissionClient, SubmissionRequest

logger = logging.getLogger(__name__)


class RelayerSubmissionClient(SubmissionClient):
    """Posts transfers to an external relayer service.

    The relayer answers `{"tx_hash": "0x..."}` (or `txHash`) on success.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return "relayer"

    def _payload(self, request: SubmissionRequest) -> dict:
        return {
            "mint_id": request.mint_id,
            "asset_id": request.asset_id,
            "symbol": request.symbol,
            "contract_address": request.contract_address,
            "to": request.beneficiary,
            "amount": str(request.amount),
            "raw_amount": str(request.raw_amount),
            "decimals": request.decimals,
            "chain_id": request.chain_id,
            "network_id": request.network_id,
        }

    async def submit(self, request: SubmissionRequest) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/transfers",
                    headers=headers,
                    json=self._payload(request),
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logger.error(f"Relayer request failed for {request.asset_id}: {e}")
            raise SubmissionError(
                f"Relayer unreachable: {e}", asset_id=request.asset_id
            ) from e

        if response.status_code not in (200, 201, 202):
            raise SubmissionError(
                f"Relayer rejected {request.asset_id}: HTTP {response.status_code} {response.text[:200]}",
                asset_id=request.asset_id,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SubmissionError(
                f"Relayer returned invalid JSON for {request.asset_id}", asset_id=request.asset_id
            ) from e

        if not isinstance(data, dict):
            raise SubmissionError(
                f"Relayer returned an unexpected payload for {request.asset_id}",
                asset_id=request.asset_id,
            )

        tx_hash = data.get("tx_hash") or data.get("txHash")
        if not isinstance(tx_hash, str) or not tx_hash:
            raise SubmissionError(
                f"Relayer returned no transaction hash for {request.asset_id}",
                asset_id=request.asset_id,
            )
        return tx_hash
