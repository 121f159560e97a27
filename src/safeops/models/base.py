from datetime import UTC, datetime, time


def utc_now() -> datetime:
    """Return current UTC time as naive datetime (for PostgreSQL TIMESTAMP).

    Database columns use TIMESTAMP WITHOUT TIME ZONE, so we strip tzinfo.
    All times are stored in UTC by convention.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalize a datetime to the naive-UTC storage convention.

    Aware values are converted to UTC first, so a caller-local offset never
    shifts day or duration arithmetic.
    """
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def utc_day_start(value: datetime) -> datetime:
    """Midnight (naive UTC) of the UTC calendar day containing ``value``."""
    return datetime.combine(as_naive_utc(value).date(), time.min)
