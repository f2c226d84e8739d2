"""Tests for the FastAPI endpoints."""

from decimal import Decimal

import pytest

from conftest import ALICE, USDC_ADDRESS

CHAIN_BODY = {
    "id": "base-mainnet",
    "name": "base",
    "display_name": "Base",
    "chain_id": 8453,
    "rpc_url": "https://mainnet.base.org",
    "explorer_url": "https://basescan.org",
    "native_currency": {"name": "Ether", "symbol": "ETH", "decimals": 18},
}


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "bskt"

    @pytest.mark.asyncio
    async def test_detailed_health(self, client):
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["config"]["environment"] == "test"
        assert data["backup"]["running"] is True
        assert data["clients"] == {"por": "fake", "submission": "dryrun"}


class TestApiKeys:
    """Tests for the X-API-Key check."""

    @pytest.fixture
    def api_keys(self):
        return "key-1,key-2"

    @pytest.mark.asyncio
    async def test_missing_key(self, client):
        response = await client.get("/chains")

        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_wrong_key(self, client):
        response = await client.get("/chains", headers={"X-API-Key": "nope"})

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "error": "FORBIDDEN",
            "message": "Invalid API key",
        }

    @pytest.mark.asyncio
    async def test_valid_key(self, client):
        response = await client.get("/chains", headers={"X-API-Key": "key-2"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_is_public(self, client):
        response = await client.get("/health")

        assert response.status_code == 200


class TestChainEndpoints:
    """Tests for the chain registry endpoints."""

    @pytest.mark.asyncio
    async def test_register_and_get(self, client):
        response = await client.post("/chains/register", json=CHAIN_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert "Base" in data["message"]
        assert data["chain"]["chain_id"] == 8453

        response = await client.get("/chains/base-mainnet")
        assert response.json()["chain"]["rpc_url"] == "https://mainnet.base.org"

    @pytest.mark.asyncio
    async def test_duplicate_is_conflict(self, client):
        await client.post("/chains/register", json=CHAIN_BODY)
        response = await client.post("/chains/register", json={**CHAIN_BODY, "chain_id": 1})

        assert response.status_code == 400
        assert response.json()["error"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_invalid_body(self, client):
        response = await client.post(
            "/chains/register", json={**CHAIN_BODY, "rpc_url": "not-a-url"}
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert "rpc_url" in data["message"]

    @pytest.mark.asyncio
    async def test_missing_chain(self, client):
        response = await client.get("/chains/nope")

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_update_and_filter(self, client):
        await client.post("/chains/register", json=CHAIN_BODY)
        await client.post(
            "/chains/register",
            json={**CHAIN_BODY, "id": "base-sepolia", "chain_id": 84532, "is_testnet": True},
        )

        response = await client.put("/chains/base-mainnet", json={"display_name": "Base L2"})
        assert response.json()["chain"]["display_name"] == "Base L2"

        response = await client.get("/chains", params={"type": "testnet"})
        data = response.json()
        assert data["total"] == 1
        assert data["chains"][0]["id"] == "base-sepolia"


class TestAssetEndpoints:
    """Tests for the single-chain asset endpoints."""

    @pytest.mark.asyncio
    async def test_register_and_list_by_type(self, client):
        response = await client.post(
            "/assets/register",
            json={
                "id": "usdc",
                "type": "monetary",
                "name": "USD Coin",
                "symbol": "USDC",
                "decimals": 6,
                "contract_address": USDC_ADDRESS,
            },
        )
        assert response.status_code == 200

        response = await client.get("/assets/type/monetary")
        assert [a["id"] for a in response.json()["assets"]] == ["usdc"]

        response = await client.get("/assets", params={"type": "nft"})
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_bad_contract_address(self, client):
        response = await client.post(
            "/assets/register",
            json={
                "id": "bad",
                "type": "monetary",
                "name": "Bad",
                "symbol": "BAD",
                "contract_address": "0x1234",
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_type(self, client):
        response = await client.get("/assets/type/bonds")

        assert response.status_code == 400


class TestBasketEndpoints:
    """Tests for the single-chain basket endpoints."""

    @pytest.mark.asyncio
    async def test_get_basket_with_asset_refs(self, client, basket):
        response = await client.get("/baskets/b1")

        assert response.status_code == 200
        assets = response.json()["basket"]["assets"]
        assert assets[0]["asset"] == {"id": "usdc", "symbol": "USDC", "type": "monetary"}

    @pytest.mark.asyncio
    async def test_expand(self, client, basket):
        response = await client.post("/baskets/b1/expand", json={"amount": "1000"})

        assert response.status_code == 200
        assets = response.json()["assets"]
        assert [(a["asset_id"], a["weight"]) for a in assets] == [("usdc", 60), ("gold", 40)]
        assert [Decimal(a["amount"]) for a in assets] == [Decimal("600"), Decimal("400")]

    @pytest.mark.asyncio
    async def test_bad_weights(self, client, basket):
        response = await client.post(
            "/baskets",
            json={
                "id": "b2",
                "name": "Broken",
                "symbol": "BRK",
                "assets": [
                    {"asset_id": "usdc", "weight": 50},
                    {"asset_id": "gold", "weight": 40},
                ],
            },
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert "current: 90" in data["message"]

    @pytest.mark.asyncio
    async def test_expand_rejects_negative_amount(self, client, basket):
        response = await client.post("/baskets/b1/expand", json={"amount": "-5"})

        assert response.status_code == 400


class TestMintEndpoints:
    """Tests for the single-chain mint endpoints."""

    @pytest.mark.asyncio
    async def test_mint_and_status(self, client, basket):
        response = await client.post(
            "/mints",
            json={"basket_id": "b1", "beneficiary": ALICE, "amount": "1000", "transaction_id": "TX1"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["transaction_id"] == "TX1"
        assert data["mint_record"]["status"] == "completed"
        assert len(data["mint_record"]["assets"]) == 2

        response = await client.get("/mints/status/TX1")
        assert response.json()["mint_record"]["id"] == "mint-TX1"

        response = await client.get("/mints/basket/b1")
        assert response.json()["stats"]["completed"] == 1

        response = await client.get("/mints")
        assert response.json()["stats"]["total"] == 1

    @pytest.mark.asyncio
    async def test_por_failure(self, client, basket, por):
        por.reserve_balance = Decimal("1")

        response = await client.post(
            "/mints",
            json={"basket_id": "b1", "beneficiary": ALICE, "amount": "1000", "transaction_id": "TX1"},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "POR_INELIGIBLE"
        assert data["reason"] == "insufficient_reserve"
        assert data["mint_id"] == "mint-TX1"

        response = await client.get("/mints/status/TX1")
        assert response.json()["mint_record"]["status"] == "failed"

    @pytest.mark.asyncio
    async def test_submission_failure(self, client, basket, submitter):
        submitter.fail_on = {"gold"}

        response = await client.post(
            "/mints",
            json={"basket_id": "b1", "beneficiary": ALICE, "amount": "10", "transaction_id": "TX1"},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "SUBMISSION_FAILED"
        assert data["asset_id"] == "gold"
        assert data["mint_id"] == "mint-TX1"

    @pytest.mark.asyncio
    async def test_bad_beneficiary(self, client, basket):
        response = await client.post(
            "/mints", json={"basket_id": "b1", "beneficiary": "alice", "amount": "1"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_mint(self, client):
        response = await client.get("/mints/status/NOPE")

        assert response.status_code == 404


class TestMultiChainEndpoints:
    """Tests for the multi-chain asset, basket and mint endpoints."""

    @pytest.mark.asyncio
    async def test_asset_by_chain(self, client, multichain_basket):
        response = await client.get("/multichain/assets/by-chain/polygon-mainnet")

        data = response.json()
        assert data["total"] == 2
        assert data["chain_id"] == "polygon-mainnet"

        response = await client.get("/multichain/assets/musd")
        asset = response.json()["asset"]
        assert asset["chains_deployed"] == 2

    @pytest.mark.asyncio
    async def test_remove_last_chain_conflict(self, client, multichain_basket):
        response = await client.delete("/multichain/assets/musd/remove-chain/polygon-mainnet")
        assert response.status_code == 200

        response = await client.delete("/multichain/assets/musd/remove-chain/ethereum-mainnet")
        assert response.status_code == 400
        assert response.json()["error"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_basket_by_chain(self, client, multichain_basket):
        response = await client.get("/multichain/baskets/by-chain/ethereum-mainnet")

        assert [b["id"] for b in response.json()["baskets"]] == ["mb1"]

    @pytest.mark.asyncio
    async def test_mint_on_chain(self, client, multichain_basket):
        response = await client.post(
            "/multichain/mints",
            json={
                "basket_id": "mb1",
                "beneficiary": ALICE,
                "amount": "10",
                "chain_id": "polygon-mainnet",
                "transaction_id": "TX1",
            },
        )

        assert response.status_code == 200
        record = response.json()["mint_record"]
        assert record["id"] == "mint-polygon-mainnet-TX1"
        assert record["chain_id"] == "polygon-mainnet"
        assert all(entry["chain_id"] == "polygon-mainnet" for entry in record["assets"])

        response = await client.get("/multichain/mints/mint-polygon-mainnet-TX1")
        assert response.json()["mint_record"]["status"] == "completed"

        response = await client.get("/multichain/mints/chain/polygon-mainnet")
        assert response.json()["stats"]["completed"] == 1

        response = await client.get("/multichain/mints/basket/mb1")
        assert response.json()["stats"]["chains_active"] == 1

    @pytest.mark.asyncio
    async def test_mint_on_unsupported_chain(self, client, multichain_basket):
        response = await client.post(
            "/multichain/mints",
            json={"basket_id": "mb1", "beneficiary": ALICE, "amount": "10", "chain_id": "solana"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
