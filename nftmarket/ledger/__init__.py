"""In-process stand-ins for the ledger host: balances, clock, atomic execution."""

from nftmarket.ledger.balances import Balances
from nftmarket.ledger.clock import Clock, ManualClock, SystemClock
from nftmarket.ledger.host import Host, WorldState

__all__ = [
    "Balances",
    "Clock",
    "Host",
    "ManualClock",
    "SystemClock",
    "WorldState",
]
