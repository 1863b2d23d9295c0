import copy
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from nftmarket.core.logging import Logger
from nftmarket.ledger.balances import Balances
from nftmarket.ledger.clock import Clock, SystemClock
from nftmarket.registry.registry import RegistryStore

logger: Logger = structlog.getLogger(__name__)


@dataclass(slots=True)
class WorldState:
    """Everything a transaction can read or write"""

    registries: RegistryStore = field(default_factory=RegistryStore)
    balances: Balances = field(default_factory=Balances)


class Host:
    """
    In-process execution host.

    Stands in for the chain: supplies the clock and the balance store, and
    runs each transaction against a staged copy of the world state. The stage
    replaces the committed state only when the transaction body returns
    normally; an exception discards it, so transfers issued before the
    failure are rolled back with everything else.
    """

    __slots__ = ("_state", "_clock", "_staged")

    def __init__(self, clock: Clock | None = None, state: WorldState | None = None):
        self._clock: Clock = clock or SystemClock()
        self._state = state or WorldState()
        self._staged = False

    @property
    def state(self) -> WorldState:
        """Last committed state. Treat as read-only."""
        return self._state

    @property
    def clock(self) -> Clock:
        return self._clock

    def now_seconds(self) -> int:
        return self._clock.now_seconds()

    @contextmanager
    def atomic(self) -> Iterator[WorldState]:
        if self._staged:
            raise RuntimeError("transactions cannot be nested")

        stage = copy.deepcopy(self._state)
        self._staged = True
        try:
            yield stage
        except BaseException:
            logger.debug("Transaction rolled back")
            raise
        else:
            self._state = stage
        finally:
            self._staged = False
