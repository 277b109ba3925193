"""Decode the S3 ``x-amz-restore`` header into a RestoreState.

The header looks like::

    ongoing-request="true"
    ongoing-request="false", expiry-date="Fri, 21 Dec 2012 00:00:00 GMT"

A request can report ``ongoing-request="false"`` while still carrying an
expiry description, so the tokens are checked in a fixed precedence order:
an ongoing request wins over an expiry date, which wins over the plain
"not ongoing" marker. Anything else is treated as an expired restore.
"""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from tiershift.models import (
    RestoreAvailable,
    RestoreExpired,
    RestoreInProgress,
    RestoreState,
)


_ONGOING_TRUE = 'ongoing-request="true"'
_ONGOING_FALSE = 'ongoing-request="false"'
_EXPIRY_OPEN = 'expiry-date="'


def _parse_rfc2822(raw: str) -> datetime | None:
    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        return None
    # Naive results carry "-0000" (unknown zone); RFC 5322 treats those as UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _expiry_token(lowered: str) -> str | None:
    start = lowered.find(_EXPIRY_OPEN)
    if start < 0:
        return None
    start += len(_EXPIRY_OPEN)
    end = lowered.find('"', start)
    # Unterminated quote: take the rest of the header.
    return lowered[start:] if end < 0 else lowered[start:end]


def decode_restore_state(raw: str | None) -> RestoreState | None:
    """Map a raw restore header to a RestoreState.

    Args:
        raw: Header value, or ``None`` when the object has no restore metadata.

    Returns:
        ``None`` when ``raw`` is ``None``; otherwise the decoded state.
    """
    if raw is None:
        return None

    lowered = raw.lower()
    if _ONGOING_TRUE in lowered:
        return RestoreInProgress(expiry=None)

    expiry = _expiry_token(lowered)
    if expiry is not None:
        parsed = _parse_rfc2822(expiry)
        return RestoreAvailable() if parsed is None else RestoreInProgress(expiry=parsed)

    if _ONGOING_FALSE in lowered:
        return RestoreAvailable()

    return RestoreExpired()


def describe_restore_state(state: RestoreState | None) -> str:
    """Short label for the object detail panel."""
    match state:
        case None:
            return "n/a"
        case RestoreAvailable():
            return "available"
        case RestoreExpired():
            return "expired"
        case RestoreInProgress(expiry=None):
            return "in-progress"
        case RestoreInProgress(expiry=expiry):
            return f"in-progress (ready until {expiry.isoformat()})"
    raise AssertionError(f"Unhandled restore state: {state!r}")
