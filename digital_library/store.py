from contextlib import contextmanager

from digital_library.extensions import db
from digital_library.repositories.book_repo import BookRepo
from digital_library.repositories.borrow_repo import BorrowRepo


class SqlStore:
    """
    One SQLAlchemy session shared by the catalog and the ledger.

    Services take a store instead of reaching for ``db.session`` so that
    the lending rules can be exercised against an in-memory fake.
    """

    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self.books = BookRepo(self.session)
        self.borrows = BorrowRepo(self.session)

    @contextmanager
    def transaction(self):
        # single commit point; any failure rolls back every write made inside
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
