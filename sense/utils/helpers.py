"""
Helper Functions

Contains utility functions used throughout the application.
"""

import random
import string
import time
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from ..config.game_settings import SHARE_TITLE
from ..models.game import FeedbackTier, GuessResult

USER_ID_HEADER = 'X-User-Id'

_TIER_GLYPHS = {
    FeedbackTier.CORRECT.value: '\U0001F7E9',  # green square
    FeedbackTier.CLOSE.value: '\U0001F7E8',    # yellow square
    FeedbackTier.NEUTRAL.value: '\u2B1C',      # white square
}


def generate_user_id() -> str:
    """Create a new opaque per-device identifier."""
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"user_{int(time.time() * 1000)}_{suffix}"


def get_user_identity(request_obj) -> Dict[str, object]:
    """
    Resolve the device user identifier sent by the client.

    Returns the id and whether it was freshly generated, in which case the
    client is expected to store it and send it back on later requests.
    """
    user_id = (request_obj.headers.get(USER_ID_HEADER) or '').strip()
    if user_id:
        return {'user_id': user_id, 'created': False}
    return {'user_id': generate_user_id(), 'created': True}


def get_today_date(now: Optional[datetime] = None) -> str:
    """Today's puzzle key (UTC calendar day, ISO format)."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date().isoformat()


def generate_share_text(attempts: int,
                        max_attempts: int,
                        guesses: Sequence[GuessResult],
                        won: bool,
                        puzzle_date: str,
                        share_url: Optional[str] = None) -> str:
    """
    Build the plain-text summary players paste into chats.

    Example::

        SENSE 2026-10-19 3/6

        ⬜🟨🟩

        Play at: https://sense.example
    """
    result = f"{attempts}/{max_attempts}" if won else f"X/{max_attempts}"
    grid = ''.join(_TIER_GLYPHS.get(g.tier, _TIER_GLYPHS[FeedbackTier.NEUTRAL.value]) for g in guesses)

    text = f"{SHARE_TITLE} {puzzle_date} {result}\n\n{grid}"
    if share_url:
        text += f"\n\nPlay at: {share_url}"
    return text
