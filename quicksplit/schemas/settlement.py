from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from bson import ObjectId
from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)

from quicksplit.utils.money import to_decimal

# Decimal internally, plain JSON number on the wire.
Money = Annotated[
    Decimal,
    BeforeValidator(to_decimal),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class UserRef(BaseModel):
    """
    A group member as seen by the settlement engine.

    Only ``id`` is interpreted; ``name`` and ``email`` ride along for display.
    Accepts ``{"_id": ...}`` as sent by the Mongo-backed ledger, ``{"id": ...}``,
    or a bare id string / ObjectId.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: Optional[str] = None
    email: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_bare_id(cls, value: Any) -> Any:
        if isinstance(value, (str, int, ObjectId)):
            return {"id": str(value)}
        return value

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)


class Balance(BaseModel):
    """Net position of one member: positive = is owed, negative = owes."""
    model_config = ConfigDict(frozen=True)

    user: UserRef
    amount: Money


class Settlement(BaseModel):
    """A single directed payment: ``from`` pays ``to`` exactly ``amount``."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_user: UserRef = Field(alias="from")
    to_user: UserRef = Field(alias="to")
    amount: Money


class DisplaySettlement(Settlement):
    """Settlement personalised for the member looking at it."""
    is_user_payer: bool
    is_user_receiver: bool
    is_user_involved: bool
    display_text: str
    direction: str  # outgoing | incoming | other


class SettlementStats(BaseModel):
    total_transactions: int = 0
    total_amount: Money = Decimal("0")
    unique_participants: int = 0
    average_amount: Money = Decimal("0")


class UserSettlements(BaseModel):
    to_pay: List[Settlement] = Field(default_factory=list)
    to_receive: List[Settlement] = Field(default_factory=list)
    total_to_pay: Money = Decimal("0")
    total_to_receive: Money = Decimal("0")
    net_amount: Money = Decimal("0")


class SettlementComparison(BaseModel):
    count_match: bool
    count1: int
    count2: int
    total_match: bool
    total1: Money
    total2: Money
    difference: Money


class SettlementPlan(BaseModel):
    """Everything the settle-up screen needs for one group in one payload."""
    settlements: List[Settlement]
    stats: SettlementStats
    minimum_transactions: int
    is_optimal: bool
    can_settle_all: bool
    is_valid: bool
    formatted: Optional[List[DisplaySettlement]] = None
    user_settlements: Optional[UserSettlements] = None


# ===== REQUEST / RESPONSE BODIES =====

class PlanRequest(BaseModel):
    balances: List[Balance]
    viewer_id: Optional[str] = None


class ValidateRequest(BaseModel):
    balances: List[Balance]
    settlements: List[Settlement]


class ValidateResponse(BaseModel):
    valid: bool


class SettlementListRequest(BaseModel):
    settlements: List[Settlement]


class BalanceListRequest(BaseModel):
    balances: List[Balance]


class MinimumTransactionsResponse(BaseModel):
    minimum_transactions: int
    can_settle_all: bool


class CompareRequest(BaseModel):
    first: List[Settlement]
    second: List[Settlement]


class GroupedSettlementsResponse(BaseModel):
    groups: Dict[str, List[Settlement]]
