"""
Stats Service

Folds completed daily sessions into each user's cumulative statistics.
"""

import math
from dataclasses import replace
from typing import Optional

from ..models.user import GameOutcome, UserStatsRecord
from ..utils.game_logger import game_logger


def apply_outcome(existing: Optional[UserStatsRecord], outcome: GameOutcome,
                  user_id: Optional[str] = None) -> UserStatsRecord:
    """
    Fold one completed session into a user's statistics.

    A puzzle date already recorded as ``last_puzzle_date`` is ignored, so
    retries and reloads of the same finished day never double count.

    Args:
        existing: Current record, or None for a first-time player
        outcome: The completed session
        user_id: Owner of a new record when ``existing`` is None

    Returns:
        UserStatsRecord: A new record (``existing`` itself when the date was already folded)
    """
    if existing is not None and existing.last_puzzle_date == outcome.puzzle_date:
        return existing

    if existing is None:
        existing = UserStatsRecord(user_id=user_id or "")

    attempts = max(1, outcome.attempts)
    total_played = existing.total_played + 1
    total_wins = existing.total_wins + (1 if outcome.won else 0)
    current_streak = existing.current_streak + 1 if outcome.won else 0

    # Running mean over every play, wins and losses alike
    average_attempts = (existing.average_attempts * existing.total_played + attempts) / total_played

    best_attempts = existing.best_attempts
    if outcome.won:
        best_attempts = min(best_attempts if best_attempts is not None else math.inf, attempts)

    return replace(
        existing,
        current_streak=current_streak,
        max_streak=max(existing.max_streak, current_streak),
        total_played=total_played,
        total_wins=total_wins,
        total_losses=total_played - total_wins,
        win_rate=round(total_wins / total_played * 100, 2),
        average_attempts=average_attempts,
        best_attempts=best_attempts,
        total_time_spent_seconds=existing.total_time_spent_seconds + max(0, round(outcome.time_spent_seconds)),
        last_outcome='won' if outcome.won else 'lost',
        last_played_at=outcome.played_at,
        last_attempt_count=attempts,
        last_puzzle_date=outcome.puzzle_date
    )


class StatsService:
    """
    Reads and updates user statistics through the storage service.
    """

    def __init__(self, storage):
        self.storage = storage

    def get_stats(self, user_id: str) -> Optional[UserStatsRecord]:
        """Return the user's record, or None if they have never finished a puzzle."""
        record = self.storage.get_stats(user_id)
        if record is None:
            return None
        return UserStatsRecord.from_record(record)

    def record_outcome(self, user_id: str, outcome: GameOutcome) -> UserStatsRecord:
        """
        Fold an outcome into the stored record and persist it.

        Raises:
            StorageError: If the fetch or upsert fails
        """
        existing = self.get_stats(user_id)
        updated = apply_outcome(existing, outcome, user_id=user_id)

        if updated is existing:
            game_logger.logger.info(
                f"Stats for user '{user_id}' already include {outcome.puzzle_date}; skipping"
            )
            return updated

        self.storage.upsert_stats(updated.to_dict())
        return updated


# Global service instance
_stats_service = None


def get_stats_service() -> Optional[StatsService]:
    """Get the global stats service instance."""
    return _stats_service


def initialize_stats_service(storage) -> StatsService:
    """Initialize the global stats service instance."""
    global _stats_service
    _stats_service = StatsService(storage)
    return _stats_service
