"""Read-only projections over registries."""

from nftmarket.registry.asset import Asset, AssetDetails, Auction
from nftmarket.registry.registry import RegistryStore


def is_initialized(store: RegistryStore, account: str) -> bool:
    return store.is_initialized(account)


def get_owner(store: RegistryStore, account: str, asset_id: int) -> str:
    return store.asset(account, asset_id).owner


def get_details(store: RegistryStore, account: str, asset_id: int) -> AssetDetails:
    return store.asset(account, asset_id).details()


def get_auction(store: RegistryStore, account: str, asset_id: int) -> Auction | None:
    match store.asset(account, asset_id).auction:
        case Auction() as auction:
            return auction
        case _:
            return None


def get_by_rarity(store: RegistryStore, account: str, rarity: int) -> list[int]:
    return store.get(account).get_by_rarity(rarity)


def get_all_for_sale(
    store: RegistryStore, account: str, limit: int, offset: int
) -> list[Asset]:
    return store.get(account).for_sale_window(limit=limit, offset=offset)
