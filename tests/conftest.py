from contextlib import contextmanager
from datetime import datetime

import pytest
from flask_jwt_extended import create_access_token

from digital_library import create_app
from digital_library.config import TestConfig
from digital_library.extensions import db
from digital_library.models import Book, BorrowRecord, User
from digital_library.services.auth_service import AuthService


# -----------------------------
# In-memory store for the lending rules
# -----------------------------
class FakeBooks:
    def __init__(self):
        self.rows = {}
        self.writes = 0

    def add(self, book_id, title="Test Book", author="Test Author", available=1):
        book = Book(id=book_id, title=title, author=author, published_year=2023, available=available)
        self.rows[book_id] = book
        return book

    def find_by_id(self, book_id, for_update=False):
        return self.rows.get(book_id)

    def set_availability(self, book_id, available, expected=None):
        book = self.rows.get(book_id)
        if book is None or (expected is not None and book.available != expected):
            return None
        self.writes += 1
        book.available = available
        return book


class FakeBorrows:
    def __init__(self, users):
        self.records = []
        self.users = users
        self.books = None
        self.writes = 0

    def create_open(self, user_id, book_id, due_date, borrowed_at):
        record = BorrowRecord(
            id=len(self.records) + 1,
            user_id=user_id,
            book_id=book_id,
            borrowed_at=borrowed_at,
            due_date=due_date,
            returned_at=None,
        )
        self.writes += 1
        self.records.append(record)
        return record

    def _open(self, user_id, book_id):
        return [
            r for r in self.records
            if r.user_id == user_id and r.book_id == book_id and r.returned_at is None
        ]

    def close_open(self, user_id, book_id, returned_at):
        matches = self._open(user_id, book_id)
        if not matches:
            return None
        record = max(matches, key=lambda r: (r.borrowed_at, r.id))
        self.writes += 1
        record.returned_at = returned_at
        return record

    def has_open(self, user_id, book_id):
        return bool(self._open(user_id, book_id))

    def has_open_for_book(self, book_id):
        return any(r.book_id == book_id and r.returned_at is None for r in self.records)

    def _with_refs(self, record):
        record.book = self.books.rows.get(record.book_id)
        record.user = self.users.get(record.user_id)
        return record

    def open_records_for_user(self, user_id):
        rows = [r for r in self.records if r.user_id == user_id and r.returned_at is None]
        rows.sort(key=lambda r: (r.borrowed_at, r.id), reverse=True)
        return [self._with_refs(r) for r in rows]

    def all_records_for_book(self, book_id):
        rows = [r for r in self.records if r.book_id == book_id]
        rows.sort(key=lambda r: (r.borrowed_at, r.id), reverse=True)
        return [self._with_refs(r) for r in rows]


class FakeStore:
    def __init__(self):
        self.users = {}
        self.books = FakeBooks()
        self.borrows = FakeBorrows(self.users)
        self.borrows.books = self.books
        self.commits = 0
        self.rollbacks = 0

    def add_user(self, user_id, username):
        self.users[user_id] = User(id=user_id, username=username, email=f"{username}@example.com", role="user")

    @contextmanager
    def transaction(self):
        availability = {k: b.available for k, b in self.books.rows.items()}
        returned = {id(r): r.returned_at for r in self.borrows.records}
        size = len(self.borrows.records)
        try:
            yield self
            self.commits += 1
        except Exception:
            self.rollbacks += 1
            del self.borrows.records[size:]
            for r in self.borrows.records:
                r.returned_at = returned[id(r)]
            for k, value in availability.items():
                self.books.rows[k].available = value
            raise


class FixedClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def clock():
    return FixedClock(datetime(2023, 1, 1))


# -----------------------------
# Flask app + in-memory SQLite
# -----------------------------
@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role="user", password="secret123"):
        counter["n"] += 1
        n = counter["n"]
        return AuthService().register(f"{role}_{n}", f"{role}{n}@example.com", password, role=role)

    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "username": user.username, "email": user.email},
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def add_book(app):
    def _add(title="Dune", author="Frank Herbert", published_year=1965):
        book = Book(title=title, author=author, published_year=published_year, available=1)
        db.session.add(book)
        db.session.commit()
        return book

    return _add
