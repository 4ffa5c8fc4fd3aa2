"""Map a Firebase Auth user record to a row of the authentication table."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional


def to_epoch_seconds(value: Any) -> Optional[int]:
    """Convert a millisecond timestamp or datetime to whole epoch seconds."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return int(value.timestamp())
    return int(value) // 1000


def user_to_row(user: Any) -> dict[str, Any]:
    """Build one warehouse row from a firebase_admin UserRecord.

    Empty optional strings become None, tokensValidAfterTime is None unless
    the user's tokens were revoked at some point.
    """
    metadata = getattr(user, "user_metadata", None)
    creation = getattr(metadata, "creation_timestamp", None)
    last_sign_in = getattr(metadata, "last_sign_in_timestamp", None)

    tokens_valid_after = None
    if user.tokens_valid_after_timestamp:
        tokens_valid_after = to_epoch_seconds(user.tokens_valid_after_timestamp)

    return {
        "userId": user.uid,
        "mail": user.email or None,
        "emailVerified": bool(user.email_verified),
        "disabled": bool(user.disabled),
        "displayName": user.display_name or None,
        "phoneNumber": user.phone_number or None,
        "photoURL": user.photo_url or None,
        "tokensValidAfterTime": tokens_valid_after,
        "creationTime": to_epoch_seconds(creation),
        "lastSignInTime": to_epoch_seconds(last_sign_in),
    }
