import logging
from typing import List

from quicksplit.db.session import get_database
from quicksplit.models.settlement import SettlementRecord
from quicksplit.repositories.settlement_repo import SettlementRepository
from quicksplit.schemas.settlement_record import SettlementRecordCreate
from quicksplit.utils.money import to_cents
from quicksplit.utils.settlement_validation import validate_record

logger = logging.getLogger(__name__)


class SettlementService:
    @staticmethod
    async def record(group_id: str, record_in: SettlementRecordCreate) -> SettlementRecord:
        """
        Store a payment one member made to another.

        Raises SettlementValidationError if the payment is malformed or, when
        balances are supplied, larger than what is actually outstanding.
        """
        validate_record(
            record_in.from_user_id,
            record_in.to_user_id,
            record_in.amount,
            record_in.balances,
        )

        db = await get_database()
        repo = SettlementRepository(db)

        record = SettlementRecord(
            group_id=group_id,
            from_user_id=record_in.from_user_id,
            to_user_id=record_in.to_user_id,
            amount_cents=to_cents(record_in.amount),
            note=record_in.note,
        )
        record = await repo.create(record)

        logger.info(
            "Recorded settlement %s in group %s: %s -> %s (%d cents)",
            record.id, group_id, record.from_user_id, record.to_user_id, record.amount_cents,
        )
        return record

    @staticmethod
    async def history(group_id: str) -> List[SettlementRecord]:
        db = await get_database()
        return await SettlementRepository(db).list_for_group(group_id)

    @staticmethod
    async def undo(group_id: str, record_id: str) -> bool:
        """Soft-delete a record. Returns False if it does not exist in this group."""
        db = await get_database()
        repo = SettlementRepository(db)

        record = await repo.get(record_id)
        if record is None or record.group_id != group_id:
            return False

        deleted = await repo.soft_delete(record_id)
        if deleted:
            logger.info("Undid settlement %s in group %s", record_id, group_id)
        return deleted
