"""
Settlement engine - turns net balances into who-pays-whom.

Algorithm (greedy largest-first two-pointer matching):
1. Split members into creditors (amount > EPSILON) and debtors
   (amount < -EPSILON, stored as a positive debt). Near-zero balances drop out.
2. Sort both sides by amount, largest first.
3. Match the current creditor with the current debtor for min(credit, debt),
   subtract at full precision, and step past whichever side is exhausted.
4. Stop when either side runs out.

For a balanced ledger this emits at most creditors + debtors - 1 payments.
It is not a proof of the global minimum; get_minimum_transactions() reports
max(creditors, debtors) as an estimate only.

Every function here is pure: inputs are never mutated and nothing is cached.
Amounts are Decimal throughout; only emitted amounts are rounded to cents.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from quicksplit.schemas.settlement import (
    Balance,
    DisplaySettlement,
    Settlement,
    SettlementComparison,
    SettlementPlan,
    SettlementStats,
    UserRef,
    UserSettlements,
)
from quicksplit.utils.money import EPSILON, ZERO, round_cents

logger = logging.getLogger(__name__)

BalanceLike = Union[Balance, Dict[str, Any]]
SettlementLike = Union[Settlement, Dict[str, Any]]


def _as_balances(balances: Iterable[BalanceLike]) -> List[Balance]:
    return [b if isinstance(b, Balance) else Balance.model_validate(b) for b in balances or []]


def _as_settlements(settlements: Iterable[SettlementLike]) -> List[Settlement]:
    return [
        s if isinstance(s, Settlement) else Settlement.model_validate(s)
        for s in settlements or []
    ]


def _identity(user: Any) -> str:
    """String-normalised identity of a user reference or raw id."""
    if isinstance(user, UserRef):
        return user.id
    if isinstance(user, dict):
        return str(user.get("_id", user.get("id")))
    return str(user)


def _partition(balances: List[Balance]):
    creditors = []
    debtors = []
    for balance in balances:
        if balance.amount > EPSILON:
            creditors.append([balance.user, balance.amount])
        elif balance.amount < -EPSILON:
            debtors.append([balance.user, -balance.amount])
    return creditors, debtors


def generate_settlements(balances: Iterable[BalanceLike]) -> List[Settlement]:
    """
    Compute the payments that bring every balance to zero.

    Never raises on unbalanced input; the walk simply stops when one side
    runs out and whatever was matched so far is returned.
    """
    creditors, debtors = _partition(_as_balances(balances))

    if not creditors or not debtors:
        return []

    # sorted() is stable, equal amounts keep their input order
    creditors = sorted(creditors, key=lambda entry: entry[1], reverse=True)
    debtors = sorted(debtors, key=lambda entry: entry[1], reverse=True)

    settlements: List[Settlement] = []
    creditor_idx = 0
    debtor_idx = 0

    while creditor_idx < len(creditors) and debtor_idx < len(debtors):
        creditor = creditors[creditor_idx]
        debtor = debtors[debtor_idx]

        transfer = min(creditor[1], debtor[1])
        settlements.append(
            Settlement(from_user=debtor[0], to_user=creditor[0], amount=round_cents(transfer))
        )

        creditor[1] -= transfer
        debtor[1] -= transfer

        if creditor[1] < EPSILON:
            creditor_idx += 1
        if debtor[1] < EPSILON:
            debtor_idx += 1

    logger.debug(
        "Generated %d settlements for %d creditors / %d debtors",
        len(settlements), len(creditors), len(debtors),
    )
    return settlements


def validate_settlements(
    balances: Iterable[BalanceLike],
    settlements: Iterable[SettlementLike],
) -> bool:
    """
    Check that executing every settlement zeroes out every balance.

    Paying moves the payer up towards zero, receiving moves the receiver down.
    Users that only appear in settlements start from zero.
    """
    running: Dict[str, Decimal] = {}

    for balance in _as_balances(balances):
        running[balance.user.id] = running.get(balance.user.id, ZERO) + balance.amount

    for settlement in _as_settlements(settlements):
        payer = settlement.from_user.id
        receiver = settlement.to_user.id
        running[payer] = running.get(payer, ZERO) + settlement.amount
        running[receiver] = running.get(receiver, ZERO) - settlement.amount

    return all(abs(amount) <= EPSILON for amount in running.values())


# ===== STATISTICS =====

def get_settlement_stats(settlements: Iterable[SettlementLike]) -> SettlementStats:
    settlements = _as_settlements(settlements)
    if not settlements:
        return SettlementStats()

    total = sum((s.amount for s in settlements), ZERO)
    participants = set()
    for s in settlements:
        participants.add(s.from_user.id)
        participants.add(s.to_user.id)

    return SettlementStats(
        total_transactions=len(settlements),
        total_amount=round_cents(total),
        unique_participants=len(participants),
        average_amount=round_cents(total / len(settlements)),
    )


def get_user_settlements(settlements: Iterable[SettlementLike], user_id: Any) -> UserSettlements:
    """Split settlements into what ``user_id`` pays and what they receive."""
    settlements = _as_settlements(settlements)
    user_key = _identity(user_id)

    to_pay = [s for s in settlements if s.from_user.id == user_key]
    to_receive = [s for s in settlements if s.to_user.id == user_key]

    total_to_pay = sum((s.amount for s in to_pay), ZERO)
    total_to_receive = sum((s.amount for s in to_receive), ZERO)

    return UserSettlements(
        to_pay=to_pay,
        to_receive=to_receive,
        total_to_pay=round_cents(total_to_pay),
        total_to_receive=round_cents(total_to_receive),
        net_amount=round_cents(total_to_receive - total_to_pay),
    )


def get_minimum_transactions(balances: Iterable[BalanceLike]) -> int:
    """Estimated floor on the number of payments: max(creditors, debtors)."""
    creditors, debtors = _partition(_as_balances(balances))
    return max(len(creditors), len(debtors))


def can_settle_all(balances: Iterable[BalanceLike]) -> bool:
    """True when the ledger is closed (amounts sum to zero within a cent)."""
    total = sum((b.amount for b in _as_balances(balances)), ZERO)
    return abs(total) < EPSILON


# ===== PRESENTATION =====

def format_settlement_for_display(settlement: SettlementLike, viewer_id: Any) -> DisplaySettlement:
    if not isinstance(settlement, Settlement):
        settlement = Settlement.model_validate(settlement)
    viewer = _identity(viewer_id)

    is_payer = settlement.from_user.id == viewer
    is_receiver = settlement.to_user.id == viewer
    payer_name = settlement.from_user.name or "User"
    receiver_name = settlement.to_user.name or "User"

    if is_payer:
        display_text = f"You pay {receiver_name}"
        direction = "outgoing"
    elif is_receiver:
        display_text = f"{payer_name} pays you"
        direction = "incoming"
    else:
        display_text = f"{payer_name} pays {receiver_name}"
        direction = "other"

    return DisplaySettlement(
        from_user=settlement.from_user,
        to_user=settlement.to_user,
        amount=settlement.amount,
        is_user_payer=is_payer,
        is_user_receiver=is_receiver,
        is_user_involved=is_payer or is_receiver,
        display_text=display_text,
        direction=direction,
    )


def is_user_involved(settlements: Union[SettlementLike, Iterable[SettlementLike]], user_id: Any) -> bool:
    """Does a settlement (or any settlement in a list) name ``user_id`` on either side?"""
    if isinstance(settlements, (Settlement, dict)):
        settlements = [settlements]
    user_key = _identity(user_id)
    return any(
        s.from_user.id == user_key or s.to_user.id == user_key
        for s in _as_settlements(settlements)
    )


def get_user_involvement_percentage(settlements: Iterable[SettlementLike], user_id: Any) -> float:
    settlements = _as_settlements(settlements)
    if not settlements:
        return 0.0
    involved = sum(1 for s in settlements if is_user_involved(s, user_id))
    return round(involved / len(settlements) * 100, 1)


def sort_settlements_by_amount(settlements: Iterable[SettlementLike]) -> List[Settlement]:
    return sorted(_as_settlements(settlements), key=lambda s: s.amount, reverse=True)


def group_settlements_by_creditor(settlements: Iterable[SettlementLike]) -> Dict[str, List[Settlement]]:
    grouped: Dict[str, List[Settlement]] = {}
    for s in _as_settlements(settlements):
        grouped.setdefault(s.to_user.id, []).append(s)
    return grouped


def group_settlements_by_debtor(settlements: Iterable[SettlementLike]) -> Dict[str, List[Settlement]]:
    grouped: Dict[str, List[Settlement]] = {}
    for s in _as_settlements(settlements):
        grouped.setdefault(s.from_user.id, []).append(s)
    return grouped


def compare_settlements(
    first: Iterable[SettlementLike],
    second: Iterable[SettlementLike],
) -> SettlementComparison:
    """Compare two settlement sets, e.g. server-computed vs a client preview."""
    first = _as_settlements(first)
    second = _as_settlements(second)
    total1 = sum((s.amount for s in first), ZERO)
    total2 = sum((s.amount for s in second), ZERO)
    difference = abs(total1 - total2)

    return SettlementComparison(
        count_match=len(first) == len(second),
        count1=len(first),
        count2=len(second),
        total_match=difference < EPSILON,
        total1=round_cents(total1),
        total2=round_cents(total2),
        difference=round_cents(difference),
    )


def summarize(balances: Iterable[BalanceLike], viewer_id: Optional[Any] = None) -> SettlementPlan:
    """Generate settlements for a group and bundle the derived figures."""
    balances = _as_balances(balances)
    settlements = generate_settlements(balances)
    minimum = get_minimum_transactions(balances)

    plan = SettlementPlan(
        settlements=settlements,
        stats=get_settlement_stats(settlements),
        minimum_transactions=minimum,
        is_optimal=len(settlements) <= minimum,
        can_settle_all=can_settle_all(balances),
        is_valid=validate_settlements(balances, settlements),
    )

    if viewer_id is not None:
        plan.formatted = [format_settlement_for_display(s, viewer_id) for s in settlements]
        plan.user_settlements = get_user_settlements(settlements, viewer_id)

    return plan
