from sqlalchemy import exists, select, update
from sqlalchemy.orm import joinedload

from digital_library.extensions import db
from digital_library.models.borrow import BorrowRecord


class BorrowRepo:
    """Lending ledger: one row per borrow, closed once by a return."""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def create_open(self, user_id: int, book_id: int, due_date, borrowed_at):
        record = BorrowRecord(
            user_id=user_id,
            book_id=book_id,
            borrowed_at=borrowed_at,
            due_date=due_date,
            returned_at=None,
        )
        self.session.add(record)
        self.session.flush()
        return record

    def _latest_open(self, user_id: int, book_id: int):
        stmt = (
            select(BorrowRecord)
            .where(
                BorrowRecord.user_id == user_id,
                BorrowRecord.book_id == book_id,
                BorrowRecord.returned_at.is_(None),
            )
            .order_by(BorrowRecord.borrowed_at.desc(), BorrowRecord.id.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def close_open(self, user_id: int, book_id: int, returned_at):
        record = self._latest_open(user_id, book_id)
        if record is None:
            return None

        # guarded write: a concurrent return may have closed it already
        result = self.session.execute(
            update(BorrowRecord)
            .where(BorrowRecord.id == record.id, BorrowRecord.returned_at.is_(None))
            .values(returned_at=returned_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        self.session.refresh(record)
        return record

    def has_open(self, user_id: int, book_id: int) -> bool:
        stmt = select(
            exists().where(
                BorrowRecord.user_id == user_id,
                BorrowRecord.book_id == book_id,
                BorrowRecord.returned_at.is_(None),
            )
        )
        return bool(self.session.execute(stmt).scalar())

    def has_open_for_book(self, book_id: int) -> bool:
        stmt = select(
            exists().where(BorrowRecord.book_id == book_id, BorrowRecord.returned_at.is_(None))
        )
        return bool(self.session.execute(stmt).scalar())

    def open_records_for_user(self, user_id: int):
        stmt = (
            select(BorrowRecord)
            .options(joinedload(BorrowRecord.book))
            .where(BorrowRecord.user_id == user_id, BorrowRecord.returned_at.is_(None))
            .order_by(BorrowRecord.borrowed_at.desc(), BorrowRecord.id.desc())
        )
        return list(self.session.execute(stmt).scalars())

    def all_records_for_book(self, book_id: int):
        stmt = (
            select(BorrowRecord)
            .options(joinedload(BorrowRecord.user))
            .where(BorrowRecord.book_id == book_id)
            .order_by(BorrowRecord.borrowed_at.desc(), BorrowRecord.id.desc())
        )
        return list(self.session.execute(stmt).scalars())
