from nftmarket.core.errors import InsufficientFundsError


class Balances:
    """
    Fungible balance store: account -> amount.

    Accounts that were never credited hold zero.
    """

    __slots__ = ("_balances",)

    def __init__(self, initial: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = dict(initial or {})

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def total_supply(self) -> int:
        return sum(self._balances.values())

    def credit(self, account: str, amount: int) -> int:
        """Add newly issued funds to an account, returning the new balance."""
        if amount < 0:
            raise ValueError("credit amount must be non-negative")

        self._balances[account] = self.balance_of(account) + amount
        return self._balances[account]

    def transfer(self, sender: str, receiver: str, amount: int) -> None:
        """
        Move amount from sender to receiver.

        Withdraws before depositing, so a self-transfer still requires the
        sender to hold the amount.
        """
        if amount < 0:
            raise ValueError("transfer amount must be non-negative")

        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientFundsError(sender, balance, amount)

        self._balances[sender] = balance - amount
        self._balances[receiver] = self.balance_of(receiver) + amount
