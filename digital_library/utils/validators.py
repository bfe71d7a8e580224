import re
from datetime import date

from digital_library.errors import ValidationError

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _clean_str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip()


def _published_year(value):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Published year must be an integer")
    if value < 1000:
        raise ValidationError("Published year must be a valid year")
    if value > date.today().year:
        raise ValidationError("Published year cannot be in the future")
    return value


def validate_book_input(data: dict) -> dict:
    title = _clean_str(data, "title")
    author = _clean_str(data, "author")
    if not title or not author:
        raise ValidationError("Title and author are required")
    if len(title) > 200:
        raise ValidationError("Title must not exceed 200 characters")
    if len(author) > 100:
        raise ValidationError("Author must not exceed 100 characters")

    return {
        "title": title,
        "author": author,
        "published_year": _published_year(data.get("published_year")),
    }


def validate_book_update(data: dict) -> dict:
    """Only title, author and published_year may change; availability never does."""
    fields = {}
    for key, max_len in (("title", 200), ("author", 100)):
        if key in data:
            value = _clean_str(data, key)
            if not value:
                raise ValidationError(f"{key.capitalize()} cannot be empty")
            if len(value) > max_len:
                raise ValidationError(f"{key.capitalize()} must not exceed {max_len} characters")
            fields[key] = value
    if "published_year" in data:
        fields["published_year"] = _published_year(data.get("published_year"))

    if not fields:
        raise ValidationError("No updatable fields provided")
    return fields


def validate_registration(data: dict) -> dict:
    username = _clean_str(data, "username")
    email = _clean_str(data, "email")
    password = data.get("password") or ""

    if len(username) < 3:
        raise ValidationError("Username must be at least 3 characters")
    if len(username) > 50:
        raise ValidationError("Username must not exceed 50 characters")
    if not USERNAME_RE.match(username):
        raise ValidationError("Username can only contain letters, numbers, and underscores")

    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    if len(email) > 100:
        raise ValidationError("Email must not exceed 100 characters")

    if not isinstance(password, str) or len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")
    if len(password) > 100:
        raise ValidationError("Password must not exceed 100 characters")

    # public sign-up always creates plain users; admins come from `flask create-admin`
    return {"username": username, "email": email, "password": password, "role": "user"}


def validate_login(data: dict) -> dict:
    email = _clean_str(data, "email")
    password = data.get("password")
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    if not isinstance(password, str) or not password:
        raise ValidationError("Password is required")
    return {"email": email, "password": password}


def validate_search_query(value) -> str:
    query = value.strip() if isinstance(value, str) else ""
    if not query:
        raise ValidationError("Search query is required")
    if len(query) > 100:
        raise ValidationError("Search query must not exceed 100 characters")
    return query
