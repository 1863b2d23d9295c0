"""Tests for the HTTP API."""

from unittest.mock import MagicMock

import pytest
from aiohttp.test_utils import TestClient, TestServer

from nftmarket.app import MarketNode
from nftmarket.core.config import Environment, settings
from nftmarket.ledger import Host, ManualClock
from nftmarket.market import Marketplace
from nftmarket.server import HTTPServer
from nftmarket.server.server import status_for

ALICE = "0xa11ce"
BOB = "0xb0b"


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(now=0)


@pytest.fixture
def node(clock: ManualClock) -> MarketNode:
    return MarketNode(marketplace=Marketplace(Host(clock=clock)))


@pytest.fixture
async def client(node: MarketNode):
    server = HTTPServer(node)
    async with TestClient(TestServer(server.build_app())) as client:
        yield client


async def _submit(client: TestClient, **tx):
    resp = await client.post("/transactions", json=tx)
    return resp.status, await resp.json()


@pytest.fixture
async def seeded(client: TestClient, node: MarketNode) -> TestClient:
    """Alice's registry with one asset; Alice and Bob funded."""
    node.marketplace.fund(ALICE, 1_000)
    node.marketplace.fund(BOB, 1_000)
    await _submit(client, type="initialize", sender=ALICE)
    await _submit(
        client,
        type="mint",
        sender=ALICE,
        name="Genesis",
        description="First",
        uri="ipfs://genesis",
        rarity=3,
    )
    return client


class TestHTTPServerLifecycle:
    async def test_start_already_running(self) -> None:
        server = HTTPServer(MagicMock())
        server._running = True

        # Should log warning and return early
        await server.start()

    async def test_stop_not_running(self) -> None:
        server = HTTPServer(MagicMock())

        await server.stop()


class TestStatusMapping:
    @pytest.mark.parametrize(
        argnames=("code", "status"),
        argvalues=[
            ("not_owner", 403),
            ("already_listed", 409),
            ("auction_exists", 409),
            ("asset_not_found", 404),
            ("registry_not_found", 404),
            ("bid_too_low", 400),
            ("insufficient_funds", 400),
            ("", 400),
        ],
    )
    def test_status_for(self, code: str, status: int) -> None:
        assert status_for(code) == status


class TestTransactions:
    async def test_mint_returns_asset_id(self, client: TestClient) -> None:
        await _submit(client, type="initialize", sender=ALICE)

        status, receipt = await _submit(
            client,
            type="mint",
            sender=ALICE,
            name="n",
            description="d",
            uri="u",
            rarity=1,
        )

        assert status == 200
        assert receipt["ok"] is True
        assert receipt["kind"] == "mint"
        assert receipt["result"] == 0
        assert "tx_id" in receipt

    async def test_aborted_transaction_receipt(self, seeded: TestClient) -> None:
        status, receipt = await _submit(
            seeded, type="set_price", sender=BOB, account=ALICE, asset_id=0, price=5
        )

        assert status == 403
        assert receipt["ok"] is False
        assert receipt["code"] == "not_owner"

    async def test_invalid_body_rejected(self, client: TestClient) -> None:
        resp = await client.post("/transactions", data=b'{"type": "burn"}')

        assert resp.status == 400
        data = await resp.json()
        assert data["code"] == "invalid_transaction"

    @pytest.mark.parametrize(
        "tx",
        [
            {
                "type": "start_auction",
                "sender": ALICE,
                "account": ALICE,
                "asset_id": 0,
                "starting_price": -100,
                "duration": 3600,
            },
            {
                "type": "place_bid",
                "sender": BOB,
                "account": ALICE,
                "asset_id": 0,
                "amount": -50,
            },
            {
                "type": "list_for_sale",
                "sender": ALICE,
                "account": ALICE,
                "asset_id": 0,
                "price": -1,
            },
        ],
    )
    async def test_negative_amount_rejected(
        self, seeded: TestClient, node: MarketNode, tx: dict
    ) -> None:
        # Act
        status, body = await _submit(seeded, **tx)

        # Assert
        assert status == 400
        assert body["code"] == "invalid_transaction"
        assert node.marketplace.get_auction(ALICE, 0) is None
        assert node.marketplace.balance_of(BOB) == 1_000

    async def test_listing_and_purchase(self, seeded: TestClient) -> None:
        # Arrange
        await _submit(
            seeded,
            type="list_for_sale",
            sender=ALICE,
            account=ALICE,
            asset_id=0,
            price=50,
        )

        # Act
        status, receipt = await _submit(
            seeded, type="purchase", sender=BOB, account=ALICE, asset_id=0, payment=50
        )

        # Assert
        assert status == 200
        assert receipt["result"]["fee"] == 1
        assert receipt["result"]["seller_revenue"] == 49

        resp = await seeded.get(f"/registries/{ALICE}/assets/0/owner")
        assert (await resp.json())["owner"] == BOB

    async def test_auction_flow(
        self, seeded: TestClient, clock: ManualClock
    ) -> None:
        status, receipt = await _submit(
            seeded,
            type="start_auction",
            sender=ALICE,
            account=ALICE,
            asset_id=0,
            starting_price=100,
            duration=3600,
        )
        assert status == 200
        assert receipt["result"]["end_time"] == 3600

        status, receipt = await _submit(
            seeded, type="place_bid", sender=BOB, account=ALICE, asset_id=0, amount=150
        )
        assert status == 200
        assert receipt["result"]["amount"] == 150

        status, receipt = await _submit(
            seeded, type="end_auction", sender=ALICE, account=ALICE, asset_id=0
        )
        assert status == 400
        assert receipt["code"] == "auction_not_ended"

        clock.set(3601)
        status, receipt = await _submit(
            seeded, type="end_auction", sender=ALICE, account=ALICE, asset_id=0
        )
        assert status == 200
        assert receipt["result"]["buyer"] == BOB

        resp = await seeded.get(f"/registries/{ALICE}/assets/0/auction")
        assert resp.status == 404


class TestProjections:
    async def test_registry_initialized(self, seeded: TestClient) -> None:
        resp = await seeded.get(f"/registries/{ALICE}")
        assert (await resp.json())["initialized"] is True

        resp = await seeded.get(f"/registries/{BOB}")
        assert (await resp.json())["initialized"] is False

    async def test_asset_details(self, seeded: TestClient) -> None:
        resp = await seeded.get(f"/registries/{ALICE}/assets/0")

        assert resp.status == 200
        data = await resp.json()
        assert data["name"] == "Genesis"
        assert data["owner"] == ALICE
        assert data["for_sale"] is False
        assert data["rarity"] == 3

    async def test_unknown_asset_is_404(self, seeded: TestClient) -> None:
        resp = await seeded.get(f"/registries/{ALICE}/assets/9")

        assert resp.status == 404
        assert (await resp.json())["code"] == "asset_not_found"

    async def test_unknown_registry_is_404(self, client: TestClient) -> None:
        resp = await client.get(f"/registries/{BOB}/rarity/1")

        assert resp.status == 404

    async def test_for_sale_pagination(self, seeded: TestClient) -> None:
        await _submit(
            seeded,
            type="list_for_sale",
            sender=ALICE,
            account=ALICE,
            asset_id=0,
            price=50,
        )

        resp = await seeded.get(f"/registries/{ALICE}/for-sale?limit=2&offset=0")
        assets = (await resp.json())["assets"]
        assert [asset["id"] for asset in assets] == [0]

        resp = await seeded.get(f"/registries/{ALICE}/for-sale?limit=2&offset=5")
        assert (await resp.json())["assets"] == []

    async def test_for_sale_bad_query(self, seeded: TestClient) -> None:
        resp = await seeded.get(f"/registries/{ALICE}/for-sale?limit=many")

        assert resp.status == 400

    async def test_by_rarity(self, seeded: TestClient) -> None:
        resp = await seeded.get(f"/registries/{ALICE}/rarity/3")

        assert (await resp.json())["asset_ids"] == [0]

    async def test_balance(self, seeded: TestClient) -> None:
        resp = await seeded.get(f"/accounts/{BOB}/balance")

        assert (await resp.json()) == {"account": BOB, "balance": 1_000}


class TestFaucet:
    async def test_faucet_credits(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "ENV", Environment.development)
        monkeypatch.setattr(settings, "FAUCET_ENABLED", True)

        resp = await client.post("/faucet", json={"account": BOB, "amount": 25})

        assert resp.status == 200
        assert (await resp.json())["balance"] == 25

    async def test_faucet_disabled_in_production(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "ENV", Environment.production)

        resp = await client.post("/faucet", json={"account": BOB, "amount": 25})

        assert resp.status == 403

    async def test_faucet_rejects_negative(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "ENV", Environment.development)
        monkeypatch.setattr(settings, "FAUCET_ENABLED", True)

        resp = await client.post("/faucet", json={"account": BOB, "amount": -1})

        assert resp.status == 400


class TestOperationsEndpoints:
    async def test_health_reflects_running(
        self, client: TestClient, node: MarketNode
    ) -> None:
        resp = await client.get("/health")
        assert resp.status == 503

        node._running = True
        resp = await client.get("/health")
        assert resp.status == 200
        assert (await resp.json())["healthy"] is True

    async def test_stats(self, seeded: TestClient) -> None:
        resp = await seeded.get("/stats")

        data = await resp.json()
        assert data["market"]["committed"] == 2
        assert data["registries"]["assets"] == 1

    async def test_metrics(self, seeded: TestClient) -> None:
        resp = await seeded.get("/metrics")

        assert resp.status == 200
        text = await resp.text()
        assert "nftmarket_transactions_committed_total" in text
