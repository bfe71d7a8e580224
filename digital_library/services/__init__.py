from flask import current_app

from digital_library.services.book_service import BookService
from digital_library.services.lending_service import LendingService
from digital_library.services.openlibrary_service import OpenLibraryClient
from digital_library.store import SqlStore


def get_book_service() -> BookService:
    return BookService(SqlStore())


def get_lending_service() -> LendingService:
    return LendingService(SqlStore(), loan_period_days=current_app.config["LOAN_PERIOD_DAYS"])


def get_openlibrary_client() -> OpenLibraryClient:
    client = current_app.extensions.get("openlibrary_client")
    if client is None:
        client = OpenLibraryClient(
            base_url=current_app.config["OPENLIBRARY_BASE_URL"],
            timeout=current_app.config["OPENLIBRARY_TIMEOUT"],
        )
    return client
