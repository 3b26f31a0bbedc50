"""Timestamp normalization.

Timestamps are kept as naive UTC throughout the app, matching what the
database columns store. Naive inputs are taken to already be UTC.
"""

from datetime import datetime, timezone


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
