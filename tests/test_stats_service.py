import pytest
from unittest.mock import Mock

from sense.models.user import GameOutcome, UserStatsRecord
from sense.services.stats_service import StatsService, apply_outcome


def _outcome(won, attempts, day, seconds=60.0):
    return GameOutcome(
        won=won, attempts=attempts, time_spent_seconds=seconds,
        puzzle_date=day, played_at=f"{day}T10:00:00+00:00"
    )


@pytest.mark.unit
def test_first_win_creates_record():
    stats = apply_outcome(None, _outcome(True, 3, "2026-10-17"), user_id="user_1")

    assert stats.user_id == "user_1"
    assert stats.total_played == 1
    assert stats.total_wins == 1
    assert stats.total_losses == 0
    assert stats.current_streak == 1
    assert stats.max_streak == 1
    assert stats.win_rate == 100.0
    assert stats.average_attempts == 3
    assert stats.best_attempts == 3
    assert stats.total_time_spent_seconds == 60
    assert stats.last_outcome == "won"
    assert stats.last_attempt_count == 3
    assert stats.last_puzzle_date == "2026-10-17"


@pytest.mark.unit
def test_loss_resets_streak_and_keeps_best():
    stats = apply_outcome(None, _outcome(True, 4, "2026-10-17"), user_id="user_1")
    stats = apply_outcome(stats, _outcome(True, 2, "2026-10-18"))
    stats = apply_outcome(stats, _outcome(False, 6, "2026-10-19"))

    assert stats.current_streak == 0
    assert stats.max_streak == 2
    assert stats.best_attempts == 2
    assert stats.total_losses == 1
    assert stats.win_rate == 66.67
    # Mean over every play, losses included
    assert stats.average_attempts == pytest.approx(4.0)
    assert stats.last_outcome == "lost"


@pytest.mark.unit
def test_loss_does_not_set_best_attempts():
    stats = apply_outcome(None, _outcome(False, 6, "2026-10-17"), user_id="user_1")
    assert stats.best_attempts is None
    assert stats.win_rate == 0.0


@pytest.mark.unit
def test_same_puzzle_date_is_folded_once():
    first = apply_outcome(None, _outcome(True, 3, "2026-10-17"), user_id="user_1")
    second = apply_outcome(first, _outcome(True, 3, "2026-10-17"))
    assert second is first
    assert second.total_played == 1


@pytest.mark.unit
def test_attempts_clamped_and_time_rounded():
    stats = apply_outcome(None, _outcome(False, 0, "2026-10-17", seconds=12.6), user_id="user_1")
    assert stats.average_attempts == 1
    assert stats.last_attempt_count == 1
    assert stats.total_time_spent_seconds == 13

    stats = apply_outcome(stats, _outcome(False, 6, "2026-10-18", seconds=-5))
    assert stats.total_time_spent_seconds == 13


@pytest.mark.unit
def test_record_outcome_persists_new_record():
    storage = Mock()
    storage.get_stats.return_value = None
    service = StatsService(storage)

    stats = service.record_outcome("user_1", _outcome(True, 2, "2026-10-17"))

    storage.upsert_stats.assert_called_once_with(stats.to_dict())
    assert stats.total_wins == 1


@pytest.mark.unit
def test_record_outcome_skips_already_counted_day():
    existing = apply_outcome(None, _outcome(True, 2, "2026-10-17"), user_id="user_1")
    storage = Mock()
    storage.get_stats.return_value = {**existing.to_dict(), "_id": "mongo-id"}
    service = StatsService(storage)

    stats = service.record_outcome("user_1", _outcome(True, 2, "2026-10-17"))

    storage.upsert_stats.assert_not_called()
    assert stats == existing


@pytest.mark.unit
def test_get_stats_returns_none_for_new_user(storage):
    assert StatsService(storage).get_stats("nobody") is None


@pytest.mark.unit
def test_stats_record_ignores_unknown_keys():
    record = UserStatsRecord.from_record({"user_id": "user_1", "total_played": 2, "updated_at": "x"})
    assert record.total_played == 2
