from fastapi import APIRouter, HTTPException

from quicksplit.schemas.settlement import (
    BalanceListRequest,
    CompareRequest,
    GroupedSettlementsResponse,
    MinimumTransactionsResponse,
    PlanRequest,
    SettlementComparison,
    SettlementListRequest,
    SettlementPlan,
    SettlementStats,
    UserSettlements,
    ValidateRequest,
    ValidateResponse,
)
from quicksplit.services import settlement_engine

router = APIRouter()

@router.post("/plan", response_model=SettlementPlan)
async def plan_settlements(plan_in: PlanRequest):
    """Compute who pays whom for a set of group balances"""
    return settlement_engine.summarize(plan_in.balances, viewer_id=plan_in.viewer_id)

@router.post("/validate", response_model=ValidateResponse)
async def validate_settlements(validate_in: ValidateRequest):
    """Check that a settlement set zeroes out the given balances"""
    valid = settlement_engine.validate_settlements(validate_in.balances, validate_in.settlements)
    return ValidateResponse(valid=valid)

@router.post("/stats", response_model=SettlementStats)
async def settlement_stats(body: SettlementListRequest):
    return settlement_engine.get_settlement_stats(body.settlements)

@router.post("/user/{user_id}", response_model=UserSettlements)
async def user_settlements(user_id: str, body: SettlementListRequest):
    """What a single member pays and receives"""
    return settlement_engine.get_user_settlements(body.settlements, user_id)

@router.post("/minimum", response_model=MinimumTransactionsResponse)
async def minimum_transactions(body: BalanceListRequest):
    return MinimumTransactionsResponse(
        minimum_transactions=settlement_engine.get_minimum_transactions(body.balances),
        can_settle_all=settlement_engine.can_settle_all(body.balances),
    )

@router.post("/compare", response_model=SettlementComparison)
async def compare(body: CompareRequest):
    """Compare two settlement sets, e.g. a client preview against the server plan"""
    return settlement_engine.compare_settlements(body.first, body.second)

@router.post("/group-by/{side}", response_model=GroupedSettlementsResponse)
async def group_settlements(side: str, body: SettlementListRequest):
    """Group settlements by creditor or debtor id"""
    if side == "creditor":
        groups = settlement_engine.group_settlements_by_creditor(body.settlements)
    elif side == "debtor":
        groups = settlement_engine.group_settlements_by_debtor(body.settlements)
    else:
        raise HTTPException(status_code=400, detail="side must be 'creditor' or 'debtor'")
    return GroupedSettlementsResponse(groups=groups)
