from nftmarket.core.errors import AuthorizationError, ErrorCode, PreconditionError
from nftmarket.ledger.host import WorldState
from nftmarket.registry.asset import Asset


def require_owner(state: WorldState, caller: str, account: str, asset_id: int) -> Asset:
    """Fetch an asset, aborting unless caller currently holds its title."""
    asset = state.registries.asset(account, asset_id)
    if asset.owner != caller:
        raise AuthorizationError(f"{caller} does not own asset {asset_id}")
    return asset


def transfer_ownership(
    state: WorldState, caller: str, account: str, asset_id: int, new_owner: str
) -> Asset:
    """
    Hand an asset to new_owner without payment.

    Any listing is withdrawn. An open auction is left in place and keeps
    pointing at the previous owner as placeholder bidder.
    """
    asset = require_owner(state, caller, account, asset_id)
    if new_owner == asset.owner:
        raise PreconditionError(
            ErrorCode.SAME_OWNER, f"{new_owner} already owns asset {asset_id}"
        )

    asset.owner = new_owner
    asset.for_sale = False
    asset.price = 0
    return asset
