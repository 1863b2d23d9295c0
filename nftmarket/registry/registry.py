from collections.abc import Iterator

from nftmarket.core.errors import (
    AssetNotFoundError,
    ErrorCode,
    RegistryNotFoundError,
    StateConflictError,
)
from nftmarket.registry.asset import Asset


class Registry:
    """
    Append-only collection of assets owned by one account.

    Asset ids are list indices: assets are appended on mint and never
    reordered or removed, so an id stays valid for the registry's lifetime.
    """

    __slots__ = ("_account", "_assets")

    def __init__(self, account: str) -> None:
        self._account = account
        self._assets: list[Asset] = []

    @property
    def account(self) -> str:
        return self._account

    def __len__(self) -> int:
        return len(self._assets)

    def __iter__(self) -> Iterator[Asset]:
        return iter(self._assets)

    # -------------------------------
    # Read-only operations
    # -------------------------------

    def get(self, asset_id: int) -> Asset:
        if not 0 <= asset_id < len(self._assets):
            raise AssetNotFoundError(asset_id, len(self._assets))
        return self._assets[asset_id]

    def get_by_rarity(self, rarity: int) -> list[int]:
        """Ids of assets with the given rarity, in registry order."""
        return [asset.id for asset in self._assets if asset.rarity == rarity]

    def for_sale_window(self, limit: int, offset: int) -> list[Asset]:
        """
        Listed assets among indices [offset, offset + limit).

        The window is truncated at the registry end; an offset past the end
        yields an empty list.
        """
        end = min(offset + limit, len(self._assets))
        return [
            asset for asset in self._assets[max(offset, 0) : end] if asset.for_sale
        ]

    # ---------------------------
    # Mutation operations
    # ---------------------------

    def mint(
        self,
        owner: str,
        name: str,
        description: str,
        uri: str,
        rarity: int,
    ) -> Asset:
        asset = Asset(
            id=len(self._assets),
            owner=owner,
            name=name,
            description=description,
            uri=uri,
            rarity=rarity,
        )
        self._assets.append(asset)
        return asset


class RegistryStore:
    """Keyed store of registries: account -> Registry"""

    __slots__ = ("_registries",)

    def __init__(self) -> None:
        self._registries: dict[str, Registry] = {}

    def __len__(self) -> int:
        return len(self._registries)

    def __iter__(self) -> Iterator[Registry]:
        return iter(self._registries.values())

    def is_initialized(self, account: str) -> bool:
        return account in self._registries

    def initialize(self, account: str) -> Registry:
        if account in self._registries:
            raise StateConflictError(
                ErrorCode.ALREADY_INITIALIZED,
                f"Registry already initialized for {account}",
            )

        registry = Registry(account)
        self._registries[account] = registry
        return registry

    def get(self, account: str) -> Registry:
        registry = self._registries.get(account)
        if registry is None:
            raise RegistryNotFoundError(account)
        return registry

    def asset(self, account: str, asset_id: int) -> Asset:
        return self.get(account).get(asset_id)
