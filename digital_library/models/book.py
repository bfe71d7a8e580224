from digital_library.extensions import db
from digital_library.utils.timeutil import utcnow, to_iso


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    author = db.Column(db.String(100), nullable=False, index=True)
    published_year = db.Column(db.Integer, nullable=True)

    # 1 = may be borrowed, 0 = lent out
    available = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.CheckConstraint("available IN (0, 1)", name="ck_books_available"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "published_year": self.published_year,
            "available": self.available,
            "created_at": to_iso(self.created_at),
        }
