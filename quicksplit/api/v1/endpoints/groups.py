from typing import List
from fastapi import APIRouter, HTTPException, status

from quicksplit.schemas.settlement_record import SettlementRecordCreate, SettlementRecordResponse
from quicksplit.services.settlement_service import SettlementService
from quicksplit.utils.settlement_validation import SettlementValidationError

router = APIRouter()

@router.post(
    "/{group_id}/settlements",
    response_model=SettlementRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_settlement(group_id: str, record_in: SettlementRecordCreate):
    """Record a payment made between two group members"""
    try:
        record = await SettlementService.record(group_id, record_in)
    except SettlementValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SettlementRecordResponse.from_record(record)

@router.get("/{group_id}/settlements", response_model=List[SettlementRecordResponse])
async def get_settlement_history(group_id: str):
    """Recorded settlements for a group, newest first"""
    records = await SettlementService.history(group_id)
    return [SettlementRecordResponse.from_record(r) for r in records]

@router.delete("/{group_id}/settlements/{record_id}")
async def undo_settlement(group_id: str, record_id: str):
    if not await SettlementService.undo(group_id, record_id):
        raise HTTPException(status_code=404, detail="Settlement entry not found")
    return {"status": "undo successful"}
