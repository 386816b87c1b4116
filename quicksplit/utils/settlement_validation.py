"""Settlement record validation utilities."""
from typing import Iterable, Optional

from quicksplit.schemas.settlement import Balance
from quicksplit.utils.money import EPSILON, ZERO, round_cents


class SettlementValidationError(Exception):
    """Raised when a reported settlement cannot be accepted."""
    pass


def validate_record(
    from_user_id: str,
    to_user_id: str,
    amount,
    balances: Optional[Iterable[Balance]] = None,
) -> None:
    """
    Validate a payment one member reports having made to another.

    Rules:
    - payer and receiver must differ
    - amount must be positive
    - if the group's current balances are given, the payer must be a debtor
      and the receiver a creditor, and the amount may not exceed either side
      by more than EPSILON
    """
    if str(from_user_id) == str(to_user_id):
        raise SettlementValidationError("Payer and receiver must be different users")

    amount = round_cents(amount)
    if amount <= ZERO:
        raise SettlementValidationError(f"Settlement amount must be positive, got {amount}")

    if balances is None:
        return

    net = {}
    for balance in balances:
        net[balance.user.id] = net.get(balance.user.id, ZERO) + balance.amount

    owed_by_payer = -net.get(str(from_user_id), ZERO)
    owed_to_receiver = net.get(str(to_user_id), ZERO)

    if owed_by_payer <= EPSILON:
        raise SettlementValidationError(f"User {from_user_id} has no outstanding debt")
    if owed_to_receiver <= EPSILON:
        raise SettlementValidationError(f"User {to_user_id} is not owed anything")

    limit = min(owed_by_payer, owed_to_receiver)
    if amount - limit > EPSILON:
        raise SettlementValidationError(
            f"Settlement amount {amount} exceeds the outstanding {limit}"
        )
