from sqlalchemy import text

from digital_library.extensions import db
from digital_library.utils.timeutil import utcnow, to_iso


class BorrowRecord(db.Model):
    __tablename__ = "borrow_records"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)

    borrowed_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    due_date = db.Column(db.DateTime, nullable=False)
    returned_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", backref="borrow_records")
    book = db.relationship("Book", backref=db.backref("borrow_records", cascade="all, delete-orphan"))

    __table_args__ = (
        db.Index("ix_borrow_records_pair_open", "user_id", "book_id", "returned_at"),
        db.Index("ix_borrow_records_user_open", "user_id", "returned_at"),
        # at most one open record per book
        db.Index(
            "uq_borrow_records_open_book",
            "book_id",
            unique=True,
            sqlite_where=text("returned_at IS NULL"),
            postgresql_where=text("returned_at IS NULL"),
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.returned_at is None

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "book_id": self.book_id,
            "borrowed_at": to_iso(self.borrowed_at),
            "due_date": to_iso(self.due_date),
            "returned_at": to_iso(self.returned_at),
        }
