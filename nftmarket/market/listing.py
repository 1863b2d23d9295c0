from nftmarket.core.errors import ErrorCode, PreconditionError, StateConflictError
from nftmarket.ledger.host import WorldState
from nftmarket.market import fees
from nftmarket.market.fees import Settlement
from nftmarket.market.ownership import require_owner
from nftmarket.registry.asset import Asset


def _validate_price(price: int) -> None:
    if price <= 0:
        raise PreconditionError(
            ErrorCode.INVALID_PRICE, f"price must be positive, got {price}"
        )


def set_price(
    state: WorldState, caller: str, account: str, asset_id: int, price: int
) -> Asset:
    asset = require_owner(state, caller, account, asset_id)
    _validate_price(price)

    asset.price = price
    return asset


def list_for_sale(
    state: WorldState, caller: str, account: str, asset_id: int, price: int
) -> Asset:
    asset = require_owner(state, caller, account, asset_id)
    if asset.for_sale:
        raise StateConflictError(
            ErrorCode.ALREADY_LISTED, f"Asset {asset_id} is already listed"
        )
    _validate_price(price)

    asset.for_sale = True
    asset.price = price
    return asset


def purchase(
    state: WorldState, buyer: str, account: str, asset_id: int, payment: int
) -> Settlement:
    """
    Buy a listed asset.

    The fee is computed on the asking price; anything paid above it goes to
    the seller. The registry account receives the fee.
    """
    asset = state.registries.asset(account, asset_id)
    if not asset.for_sale:
        raise PreconditionError(
            ErrorCode.NOT_FOR_SALE, f"Asset {asset_id} is not for sale"
        )
    if payment < asset.price:
        raise PreconditionError(
            ErrorCode.INSUFFICIENT_PAYMENT,
            f"payment {payment} below asking price {asset.price}",
        )

    price = asset.price
    seller = asset.owner
    cut = fees.fee(price)
    seller_revenue = payment - cut

    state.balances.transfer(buyer, seller, seller_revenue)
    state.balances.transfer(buyer, account, cut)

    asset.owner = buyer
    asset.for_sale = False
    asset.price = 0

    return Settlement(
        asset_id=asset_id,
        seller=seller,
        buyer=buyer,
        amount=price,
        fee=cut,
        seller_revenue=seller_revenue,
        fee_recipient=account,
    )
