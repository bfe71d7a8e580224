from digital_library.models.user import User
from digital_library.models.book import Book
from digital_library.models.borrow import BorrowRecord

__all__ = ["User", "Book", "BorrowRecord"]
