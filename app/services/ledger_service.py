"""
RetailOps Ledger - Running-Balance Ledger Service

One posting algorithm shared by the account ledger and the client and
supplier subsidiary ledgers:

1. Lock the subject row (account, client or supplier) so concurrent
   postings to the same subject serialize.
2. The predecessor is the latest row dated on or before the new row's
   date, ordered by (date desc, id desc). Its running balance, or zero,
   is the starting point.
3. Insert the new row with ``running_balance = previous + movement``.
4. Tail repair: every row dated after the new row is recomputed in
   (date, id) order from the new row's balance. Only rows after the
   insertion point are touched.

Movement is ``debit - credit`` for accounts and clients and
``credit - debit`` for suppliers, whose ledger is credit-normal.

Subsidiary postings finish by copying the subject's latest running balance
into ``Client.balance`` / ``Supplier.balance``. That write is a cache: it
runs in a SAVEPOINT and a failure is logged and swallowed.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Type

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.accounting import Account, JournalEntry
from app.models.counterparty import Client, Supplier
from app.models.ledger import AccountLedgerRow, ClientLedgerRow, SupplierLedgerRow
from app.services.tax_calculators import to_money
from app.utils.error_handling import InvalidAmountError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerKind:
    """Describes one running-balance ledger."""
    name: str
    row_model: Type
    subject_attr: str
    subject_model: Type
    credit_normal: bool = False
    caches_balance: bool = False

    @property
    def subject_column(self):
        return getattr(self.row_model, self.subject_attr)

    def movement(self, debit: Decimal, credit: Decimal) -> Decimal:
        if self.credit_normal:
            return credit - debit
        return debit - credit


ACCOUNT_LEDGER = LedgerKind("account", AccountLedgerRow, "account_id", Account)
CLIENT_LEDGER = LedgerKind("client", ClientLedgerRow, "client_id", Client, caches_balance=True)
SUPPLIER_LEDGER = LedgerKind(
    "supplier", SupplierLedgerRow, "supplier_id", Supplier,
    credit_normal=True, caches_balance=True,
)


class LedgerService:
    """Posts, repairs and reads running-balance ledger rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # POSTING
    # ===========================================

    async def post(
        self,
        kind: LedgerKind,
        subject_id: int,
        row_date: date,
        debit: Decimal = Decimal("0"),
        credit: Decimal = Decimal("0"),
        description: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
        journal_entry_id: Optional[int] = None,
        lock: bool = True,
    ):
        """
        Insert one ledger row for ``subject_id`` and repair every later row.

        Must run inside the caller's transaction. Pass ``lock=False`` only
        when the caller already holds the subject lock.
        """
        debit = to_money(debit)
        credit = to_money(credit)
        if debit < 0 or credit < 0 or (debit == 0 and credit == 0):
            raise InvalidAmountError(
                f"{debit}/{credit}",
                field="debit/credit",
                message="A ledger row needs a positive debit or credit and no negative side",
            )

        if lock:
            await self._lock_subject(kind, subject_id)

        model = kind.row_model
        previous = await self.db.scalar(
            select(model.running_balance)
            .where(kind.subject_column == subject_id, model.date <= row_date)
            .order_by(model.date.desc(), model.id.desc())
            .limit(1)
        )
        balance = to_money(previous) + kind.movement(debit, credit)

        row = model(
            date=row_date,
            description=description,
            reference_type=reference_type,
            reference_id=reference_id,
            journal_entry_id=journal_entry_id,
            debit=debit,
            credit=credit,
            running_balance=balance,
        )
        setattr(row, kind.subject_attr, subject_id)
        self.db.add(row)
        await self.db.flush()

        repaired = await self._repair_tail(kind, subject_id, row)
        if repaired:
            logger.debug(
                f"Back-dated {kind.name} ledger row {row.id} for subject {subject_id} "
                f"on {row_date}: recomputed {repaired} later rows"
            )

        if kind.caches_balance:
            await self._refresh_balance_cache(kind, subject_id)

        return row

    async def post_entry_rows(
        self,
        entry: JournalEntry,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
    ) -> List[AccountLedgerRow]:
        """
        One account-ledger row per journal line.

        All accounts of the entry are locked first, in ascending id order,
        so two entries touching the same accounts cannot deadlock.
        """
        for account_id in sorted({line.account_id for line in entry.lines}):
            await self._lock_subject(ACCOUNT_LEDGER, account_id)

        rows = []
        for line in entry.lines:
            rows.append(await self.post(
                ACCOUNT_LEDGER,
                line.account_id,
                entry.entry_date,
                debit=line.debit_amount,
                credit=line.credit_amount,
                description=line.description or entry.description,
                reference_type=reference_type or entry.source_type,
                reference_id=reference_id if reference_id is not None else entry.source_id,
                journal_entry_id=entry.id,
                lock=False,
            ))
        return rows

    async def post_account_row(self, account_id: int, row_date: date, **kwargs) -> AccountLedgerRow:
        return await self.post(ACCOUNT_LEDGER, account_id, row_date, **kwargs)

    async def post_client_row(self, client_id: int, row_date: date, **kwargs) -> ClientLedgerRow:
        return await self.post(CLIENT_LEDGER, client_id, row_date, **kwargs)

    async def post_supplier_row(self, supplier_id: int, row_date: date, **kwargs) -> SupplierLedgerRow:
        return await self.post(SUPPLIER_LEDGER, supplier_id, row_date, **kwargs)

    async def rebuild(self, kind: LedgerKind, subject_id: int) -> int:
        """
        Recompute every running balance of a subject from its first row.

        Idempotent; returns the number of rows whose balance changed.
        """
        await self._lock_subject(kind, subject_id)
        model = kind.row_model
        result = await self.db.execute(
            select(model)
            .where(kind.subject_column == subject_id)
            .order_by(model.date, model.id)
        )
        balance = Decimal("0.00")
        changed = 0
        for row in result.scalars():
            balance = balance + kind.movement(row.debit, row.credit)
            if row.running_balance != balance:
                row.running_balance = balance
                changed += 1
        await self.db.flush()
        if kind.caches_balance:
            await self._refresh_balance_cache(kind, subject_id)
        logger.info(f"Rebuilt {kind.name} ledger for subject {subject_id}: {changed} rows corrected")
        return changed

    # ===========================================
    # READS
    # ===========================================

    async def list_rows(
        self,
        kind: LedgerKind,
        subject_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list:
        model = kind.row_model
        query = select(model).where(kind.subject_column == subject_id)
        if start_date:
            query = query.where(model.date >= start_date)
        if end_date:
            query = query.where(model.date <= end_date)
        result = await self.db.execute(query.order_by(model.date, model.id))
        return list(result.scalars().all())

    async def balance_as_of(
        self,
        kind: LedgerKind,
        subject_id: int,
        as_of: Optional[date] = None,
    ) -> Decimal:
        """Running balance of the subject's latest row dated on or before ``as_of``."""
        model = kind.row_model
        query = select(model.running_balance).where(kind.subject_column == subject_id)
        if as_of is not None:
            query = query.where(model.date <= as_of)
        balance = await self.db.scalar(
            query.order_by(model.date.desc(), model.id.desc()).limit(1)
        )
        return to_money(balance)

    async def current_balance(self, kind: LedgerKind, subject_id: int) -> Decimal:
        return await self.balance_as_of(kind, subject_id)

    async def latest_balances(self, kind: LedgerKind, as_of: Optional[date] = None) -> Dict[int, Decimal]:
        """Latest running balance of every subject that has rows, keyed by subject id."""
        model = kind.row_model
        query = select(
            kind.subject_column.label("subject_id"),
            model.running_balance,
            func.row_number().over(
                partition_by=kind.subject_column,
                order_by=(model.date.desc(), model.id.desc()),
            ).label("rn"),
        )
        if as_of is not None:
            query = query.where(model.date <= as_of)
        ranked = query.subquery()
        result = await self.db.execute(
            select(ranked.c.subject_id, ranked.c.running_balance).where(ranked.c.rn == 1)
        )
        return {subject_id: to_money(balance) for subject_id, balance in result.all()}

    async def statement(
        self,
        kind: LedgerKind,
        subject_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict:
        """Rows in the window with the balances either side of it."""
        rows = await self.list_rows(kind, subject_id, start_date, end_date)
        if start_date is not None:
            opening = await self.balance_as_of(kind, subject_id, start_date - timedelta(days=1))
        else:
            opening = Decimal("0.00")
        closing = rows[-1].running_balance if rows else await self.balance_as_of(kind, subject_id, end_date)
        return {
            "subject_id": subject_id,
            "opening_balance": opening,
            "closing_balance": closing,
            "rows": rows,
        }

    # ===========================================
    # INTERNALS
    # ===========================================

    async def _lock_subject(self, kind: LedgerKind, subject_id: int) -> None:
        subject = kind.subject_model
        found = await self.db.scalar(
            select(subject.id).where(subject.id == subject_id).with_for_update()
        )
        if found is None:
            raise NotFoundError(kind.subject_model.__name__, subject_id)

    async def _repair_tail(self, kind: LedgerKind, subject_id: int, row) -> int:
        model = kind.row_model
        result = await self.db.execute(
            select(model)
            .where(kind.subject_column == subject_id, model.date > row.date)
            .order_by(model.date, model.id)
        )
        balance = row.running_balance
        count = 0
        for later in result.scalars():
            balance = balance + kind.movement(later.debit, later.credit)
            later.running_balance = balance
            count += 1
        if count:
            await self.db.flush()
        return count

    async def _refresh_balance_cache(self, kind: LedgerKind, subject_id: int) -> None:
        balance = await self.current_balance(kind, subject_id)
        try:
            async with self.db.begin_nested():
                await self._write_balance_cache(kind, subject_id, balance)
        except SQLAlchemyError as e:
            # Cached copy only; the ledger rows are already written
            logger.warning(
                f"Could not update cached balance of {kind.name} {subject_id}: {e}",
                extra={"subject": kind.name, "subject_id": subject_id},
            )

    async def _write_balance_cache(self, kind: LedgerKind, subject_id: int, balance: Decimal) -> None:
        await self.db.execute(
            update(kind.subject_model)
            .where(kind.subject_model.id == subject_id)
            .values(balance=balance)
        )
