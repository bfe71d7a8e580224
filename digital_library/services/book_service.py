from digital_library.errors import ConflictError, NotFoundError, ValidationError
from digital_library.utils.pagination import calculate_offset, calculate_pagination


class BookService:
    def __init__(self, store):
        self.store = store

    def list_books(self, page: int = 1, limit: int = 10) -> dict:
        books = self.store.books.list_all(limit, calculate_offset(page, limit))
        total = self.store.books.count()
        return {"data": books, "pagination": calculate_pagination(page, limit, total)}

    def search_books(self, term: str, page: int = 1, limit: int = 10) -> dict:
        term = (term or "").strip()
        if not term:
            raise ValidationError("Search query is required")
        books = self.store.books.search(term, limit, calculate_offset(page, limit))
        total = self.store.books.search_count(term)
        return {"data": books, "pagination": calculate_pagination(page, limit, total)}

    def get_book(self, book_id: int):
        book = self.store.books.find_by_id(book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book

    def create_book(self, fields: dict):
        with self.store.transaction() as tx:
            book = tx.books.create(
                title=fields["title"],
                author=fields["author"],
                published_year=fields.get("published_year"),
            )
        return book

    def update_book(self, book_id: int, fields: dict):
        with self.store.transaction() as tx:
            book = tx.books.find_by_id(book_id)
            if not book:
                raise NotFoundError("Book not found")
            tx.books.update(book, fields)
        return book

    def delete_book(self, book_id: int):
        with self.store.transaction() as tx:
            book = tx.books.find_by_id(book_id, for_update=True)
            if not book:
                raise NotFoundError("Book not found")
            if tx.borrows.has_open_for_book(book_id):
                raise ConflictError("Book is currently borrowed")
            tx.books.delete(book)
