"""
Open Library search client.

Wraps ``GET {base_url}/search.json`` and maps transport failures onto the
application's error types so that the HTTP layer can report them with a
meaningful status.
"""
import logging

import httpx

from digital_library.errors import (
    AppError,
    GatewayTimeoutError,
    ServiceUnavailableError,
    TooManyRequestsError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = "key,title,author_name,first_publish_year,isbn"


class OpenLibraryClient:
    def __init__(self, base_url: str = "https://openlibrary.org", timeout: float = 5.0, transport=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # tests pass an httpx.MockTransport
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    def search_books(self, query: str, page: int = 1, limit: int = 10) -> dict:
        if not query or not query.strip():
            raise ValidationError("Search query is required")

        query = query.strip()
        params = {
            "q": query,
            "limit": limit,
            "offset": (page - 1) * limit,
            "fields": SEARCH_FIELDS,
        }

        try:
            with self._client() as client:
                response = client.get("/search.json", params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as exc:
            logger.error("OpenLibrary search failed query=%r error=%s", query, exc)
            raise GatewayTimeoutError("Search request timed out")
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("OpenLibrary search failed query=%r status=%s", query, status)
            if status == 429:
                raise TooManyRequestsError("Too many requests to OpenLibrary API")
            if status >= 500:
                raise ServiceUnavailableError("OpenLibrary service is temporarily unavailable")
            raise AppError("Failed to search external library", 500)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("OpenLibrary search failed query=%r error=%s", query, exc)
            raise AppError("Failed to search external library", 500)

        books = [
            {
                "key": doc.get("key"),
                "title": doc.get("title"),
                "author_name": doc.get("author_name"),
                "first_publish_year": doc.get("first_publish_year"),
                "isbn": doc.get("isbn"),
            }
            for doc in payload.get("docs", [])
        ]
        total = payload.get("numFound", 0)

        logger.info("OpenLibrary search completed query=%r results=%d total=%s", query, len(books), total)

        return {"books": books, "total": total, "page": page, "limit": limit}
