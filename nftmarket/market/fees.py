"""Fee engine: the flat marketplace cut taken on every sale and settlement."""

from typing import Final, NamedTuple

FEE_PCT: Final[int] = 2


class FeeSplit(NamedTuple):
    fee: int
    revenue: int


class Settlement(NamedTuple):
    """Funds moved when an asset changes hands for value"""

    asset_id: int
    seller: str
    buyer: str
    amount: int  # amount the fee was computed on
    fee: int
    seller_revenue: int
    fee_recipient: str


def fee(amount: int) -> int:
    return amount * FEE_PCT // 100


def revenue(amount: int) -> int:
    return amount - fee(amount)


def split(amount: int) -> FeeSplit:
    cut = fee(amount)
    return FeeSplit(fee=cut, revenue=amount - cut)
