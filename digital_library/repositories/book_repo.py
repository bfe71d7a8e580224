from sqlalchemy import func, or_, select, update

from digital_library.extensions import db
from digital_library.models.book import Book


class BookRepo:
    """Catalog store: books and their availability flag."""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def create(self, title: str, author: str, published_year=None):
        book = Book(title=title, author=author, published_year=published_year, available=1)
        self.session.add(book)
        self.session.flush()
        return book

    def find_by_id(self, book_id: int, for_update: bool = False):
        stmt = select(Book).where(Book.id == book_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self, limit: int = 10, offset: int = 0):
        stmt = (
            select(Book)
            .order_by(Book.created_at.desc(), Book.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.execute(stmt).scalars())

    def count(self) -> int:
        return self.session.execute(select(func.count(Book.id))).scalar_one()

    @staticmethod
    def _matches(term: str):
        # literal substring: LIKE wildcards in the term are escaped
        escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        return or_(
            func.lower(Book.title).like(pattern, escape="\\"),
            func.lower(Book.author).like(pattern, escape="\\"),
        )

    def search(self, term: str, limit: int = 10, offset: int = 0):
        stmt = (
            select(Book)
            .where(self._matches(term))
            .order_by(Book.created_at.desc(), Book.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.execute(stmt).scalars())

    def search_count(self, term: str) -> int:
        stmt = select(func.count(Book.id)).where(self._matches(term))
        return self.session.execute(stmt).scalar_one()

    def set_availability(self, book_id: int, available: int, expected=None):
        """
        Flip the availability flag. With ``expected`` the update only
        applies while the row still holds that value; returns None when
        no row was touched.
        """
        stmt = update(Book).where(Book.id == book_id)
        if expected is not None:
            stmt = stmt.where(Book.available == expected)
        result = self.session.execute(
            stmt.values(available=available).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return self.session.get(Book, book_id, populate_existing=True)

    def update(self, book, fields: dict):
        for k in ("title", "author", "published_year"):
            if k in fields:
                setattr(book, k, fields[k])
        self.session.flush()
        return book

    def delete(self, book):
        self.session.delete(book)
        self.session.flush()
