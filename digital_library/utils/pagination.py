import math

from digital_library.errors import ValidationError

# largest offset a signed 64-bit column or LIMIT clause accepts
MAX_OFFSET = 2 ** 63 - 1


def calculate_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def calculate_pagination(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit)
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def _to_int(value, message):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message)


def validate_pagination_params(page=None, limit=None, default_limit: int = 10, max_limit: int = 100):
    """
    Normalize ``page``/``limit`` query values. Missing values fall back to
    1 and ``default_limit``; anything out of range is rejected.
    """
    page_num = 1 if page in (None, "") else _to_int(page, "Page must be greater than 0")
    limit_num = default_limit if limit in (None, "") else _to_int(
        limit, f"Limit must be between 1 and {max_limit}"
    )

    if page_num < 1:
        raise ValidationError("Page must be greater than 0")
    if limit_num < 1 or limit_num > max_limit:
        raise ValidationError(f"Limit must be between 1 and {max_limit}")
    if calculate_offset(page_num, limit_num) > MAX_OFFSET:
        raise ValidationError("Page is out of range")

    return page_num, limit_num
