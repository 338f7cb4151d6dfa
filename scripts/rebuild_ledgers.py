"""
Recompute every running balance from the first row of each subject.
Run this after importing ledger rows or repairing data by hand.
"""

import asyncio

from sqlalchemy import select

from app.database import async_session_maker, transaction_scope
from app.services.ledger_service import (
    ACCOUNT_LEDGER,
    CLIENT_LEDGER,
    SUPPLIER_LEDGER,
    LedgerService,
)


async def rebuild_ledgers():
    async with async_session_maker() as session:
        ledger = LedgerService(session)
        for kind in (ACCOUNT_LEDGER, CLIENT_LEDGER, SUPPLIER_LEDGER):
            result = await session.execute(select(kind.subject_column).distinct())
            subject_ids = sorted(result.scalars().all())
            corrected = 0
            async with transaction_scope(session):
                for subject_id in subject_ids:
                    corrected += await ledger.rebuild(kind, subject_id)
            print(f'{kind.name} ledger: {len(subject_ids)} subjects, {corrected} rows corrected')


if __name__ == '__main__':
    asyncio.run(rebuild_ledgers())
