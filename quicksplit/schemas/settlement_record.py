from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from quicksplit.models.settlement import SettlementRecord
from quicksplit.schemas.settlement import Balance, Money
from quicksplit.utils.money import from_cents


class SettlementRecordCreate(BaseModel):
    """Request body to record a payment between two group members."""
    from_user_id: str
    to_user_id: str
    amount: Money
    note: Optional[str] = Field(None, max_length=200)
    # Current group balances from the ledger; when present the payment is
    # checked against them before it is stored.
    balances: Optional[List[Balance]] = None


class SettlementRecordResponse(BaseModel):
    id: str
    group_id: str
    from_user_id: str
    to_user_id: str
    amount: Money
    note: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: SettlementRecord) -> "SettlementRecordResponse":
        return cls(
            id=str(record.id),
            group_id=record.group_id,
            from_user_id=record.from_user_id,
            to_user_id=record.to_user_id,
            amount=from_cents(record.amount_cents),
            note=record.note,
            created_at=record.created_at,
        )
