from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from digital_library.errors import ConflictError, InternalError, NotFoundError
from digital_library.utils.timeutil import utcnow, to_iso

LOAN_PERIOD_DAYS = 14

BOOK_NOT_FOUND = "Book not found"
NOT_AVAILABLE = "Book is not available for borrowing"
ALREADY_BORROWED = "You have already borrowed this book"
NOT_BORROWED = "You have not borrowed this book"
RETURN_FAILED = "Failed to return book"


class LendingService:
    """
    Borrow / return transitions over a store exposing ``books``,
    ``borrows`` and ``transaction()``.

    Each transition runs inside one transaction: the preconditions are
    read first, then the ledger row and the availability flag are written,
    and a guarded write that touches no row aborts the whole unit.
    """

    def __init__(self, store, loan_period_days: int = LOAN_PERIOD_DAYS, clock=utcnow):
        self.store = store
        self.loan_period = timedelta(days=loan_period_days)
        self.clock = clock

    def borrow(self, user_id: int, book_id: int) -> dict:
        with self.store.transaction() as tx:
            book = tx.books.find_by_id(book_id, for_update=True)
            if book is None:
                raise NotFoundError(BOOK_NOT_FOUND)

            if not book.available:
                # the caller may be the one holding it
                if tx.borrows.has_open(user_id, book_id):
                    raise ConflictError(ALREADY_BORROWED)
                raise ConflictError(NOT_AVAILABLE)

            if tx.borrows.has_open(user_id, book_id):
                raise ConflictError(ALREADY_BORROWED)

            now = self.clock()
            due_date = now + self.loan_period

            try:
                record = tx.borrows.create_open(user_id, book_id, due_date, now)
            except IntegrityError:
                # another open record for this book landed first
                raise ConflictError(NOT_AVAILABLE)

            book = tx.books.set_availability(book_id, 0, expected=1)
            if book is None:
                raise ConflictError(NOT_AVAILABLE)

        return {"book": book, "borrow_record": record, "due_date": to_iso(due_date)}

    def return_book(self, user_id: int, book_id: int) -> dict:
        with self.store.transaction() as tx:
            book = tx.books.find_by_id(book_id, for_update=True)
            if book is None:
                raise NotFoundError(BOOK_NOT_FOUND)

            if not tx.borrows.has_open(user_id, book_id):
                raise ConflictError(NOT_BORROWED)

            record = tx.borrows.close_open(user_id, book_id, self.clock())
            if record is None:
                raise InternalError(RETURN_FAILED)

            book = tx.books.set_availability(book_id, 1, expected=0)
            if book is None:
                raise InternalError(RETURN_FAILED)

        return {"book": book, "borrow_record": record}

    def list_borrowed_books(self, user_id: int) -> list:
        rows = []
        for record in self.store.borrows.open_records_for_user(user_id):
            row = record.book.to_dict()
            row.update({
                "borrow_id": record.id,
                "borrowed_at": to_iso(record.borrowed_at),
                "due_date": to_iso(record.due_date),
                "returned_at": to_iso(record.returned_at),
            })
            rows.append(row)
        return rows

    def borrow_history(self, book_id: int) -> list:
        if self.store.books.find_by_id(book_id) is None:
            raise NotFoundError(BOOK_NOT_FOUND)

        history = []
        for record in self.store.borrows.all_records_for_book(book_id):
            row = record.to_dict()
            user = record.user
            row["user"] = {
                "id": record.user_id,
                "username": user.username if user else None,
                "email": user.email if user else None,
            }
            history.append(row)
        return history
