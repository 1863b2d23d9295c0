"""Shared pytest fixtures for all test modules."""

import pytest

from nftmarket.ledger import Host, ManualClock
from nftmarket.market import Marketplace

# Registry owner and minter
ALICE = "0xa11ce"
BOB = "0xb0b"
CAROL = "0xca201"

STARTING_BALANCE = 10_000


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(now=0)


@pytest.fixture
def host(clock: ManualClock) -> Host:
    return Host(clock=clock)


@pytest.fixture
def market(host: Host) -> Marketplace:
    """Marketplace with Alice's registry initialized and everyone funded."""
    market = Marketplace(host)
    market.initialize(ALICE)
    for account in (ALICE, BOB, CAROL):
        market.fund(account, STARTING_BALANCE)
    return market


@pytest.fixture
def minted(market: Marketplace) -> int:
    """One asset minted into Alice's registry."""
    return market.mint(
        ALICE,
        name="Genesis",
        description="First of its kind",
        uri="ipfs://genesis",
        rarity=3,
    )
