from collections import Counter
from dataclasses import dataclass, field


@dataclass(slots=True)
class MarketStats:
    """Running totals for transactions handled by a marketplace."""

    committed: int = 0
    aborted: int = 0
    committed_by_kind: Counter[str] = field(default_factory=Counter)
    aborted_by_code: Counter[str] = field(default_factory=Counter)
    assets_minted: int = 0
    sales: int = 0
    bids: int = 0
    settlements: int = 0
    sale_volume: int = 0
    fees_paid: int = 0

    @property
    def abort_ratio(self) -> float:
        """Aborted / total transactions (0.0 if none)."""
        total = self.committed + self.aborted
        if total > 0:
            return self.aborted / total
        return 0.0

    def as_dict(self) -> dict:
        return {
            "committed": self.committed,
            "aborted": self.aborted,
            "abort_ratio": self.abort_ratio,
            "committed_by_kind": dict(self.committed_by_kind),
            "aborted_by_code": dict(self.aborted_by_code),
            "assets_minted": self.assets_minted,
            "sales": self.sales,
            "bids": self.bids,
            "settlements": self.settlements,
            "sale_volume": self.sale_volume,
            "fees_paid": self.fees_paid,
        }
