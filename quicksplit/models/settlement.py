"""
Settlement record model - a payment a member reports having made.

Design principles:
- One document per reported payment, scoped to a group
- Amounts stored in integer cents
- Undo is a soft delete, history keeps the row
"""

from typing import Optional
from pydantic import Field

from quicksplit.models.base import MongoModel


class SettlementRecord(MongoModel):
    """
    from_user_id paid to_user_id amount_cents within group_id.

    Invariants:
    - amount_cents > 0
    - from_user_id != to_user_id
    """
    group_id: str
    from_user_id: str
    to_user_id: str
    amount_cents: int = Field(gt=0)
    note: Optional[str] = None
    is_deleted: bool = False
