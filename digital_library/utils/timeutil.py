from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, which is what the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_iso(value):
    """Render a stored UTC datetime as ``YYYY-MM-DDTHH:MM:SSZ`` (None stays None)."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")
