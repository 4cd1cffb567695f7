"""
Game Service

Session policy for the daily puzzle: guess validation, hint progression,
attempt budget, elapsed-time bookkeeping and completion. Wraps the stateless
evaluator and persists through the storage service.
"""

import math
import threading
from dataclasses import asdict, fields, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from ..config.game_settings import MAX_ATTEMPTS
from ..models.game import GuessResult, Outcome, PuzzleDefinition, SessionState
from ..models.user import GameOutcome
from ..utils.game_logger import game_logger
from .evaluator import evaluate
from .stats_service import StatsService
from .storage_service import StorageError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class GameService:
    """
    Core game service for daily puzzle sessions.

    This class handles:
    - Restoring a (user, date) session from its progress record
    - Guess validation (terminal, empty, budget, duplicate, in-flight)
    - Hint index and completion rules
    - Persisting progress before folding a finished game into user stats
    """

    def __init__(self, storage, stats_service: StatsService,
                 clock: Optional[Callable[[], datetime]] = None):
        self.storage = storage
        self.stats_service = stats_service
        self.clock = clock or _utcnow
        self._lock = threading.Lock()
        self._in_flight: Set[Tuple[str, str]] = set()

    @staticmethod
    def hint_index_for(guesses: Sequence[GuessResult], puzzle: PuzzleDefinition) -> int:
        """One more hint per non-winning guess, capped at the last hint."""
        misses = sum(1 for g in guesses if not g.is_correct)
        return min(misses, puzzle.max_hint_index)

    def get_puzzle(self, puzzle_date: str) -> Optional[PuzzleDefinition]:
        """
        Fetch a day's puzzle.

        Returns:
            PuzzleDefinition or None if no puzzle exists for the date
        """
        record = self.storage.get_puzzle(puzzle_date)
        if record is None:
            return None
        return PuzzleDefinition.from_record(record)

    def load_or_init(self, user_id: str, puzzle_date: str, puzzle: PuzzleDefinition,
                     persisted: Optional[Dict[str, Any]] = None) -> SessionState:
        """
        Build the session for (user, date) from its stored progress record.

        Older records may hold only the raw guess strings; their feedback is
        rebuilt by re-running the evaluator against the current puzzle.

        Args:
            user_id: Device user identifier
            puzzle_date: Puzzle day
            puzzle: The day's puzzle
            persisted: Stored progress record, or None for a first visit

        Returns:
            SessionState ready for play or display
        """
        if not persisted:
            return SessionState(user_id=user_id, puzzle_date=puzzle_date)

        feedback_records = persisted.get('guess_feedback') or []
        if isinstance(feedback_records, list) and feedback_records:
            guesses = [GuessResult.from_record(record) for record in feedback_records]
        else:
            raw_guesses = persisted.get('guesses') or []
            guesses = [
                evaluate(guess, puzzle.answer, puzzle.synonyms, puzzle.category)
                for guess in raw_guesses
            ]
            if raw_guesses:
                game_logger.logger.info(
                    f"Backfilled feedback for {len(raw_guesses)} stored guesses "
                    f"(user '{user_id}', puzzle {puzzle_date})"
                )

        # A win or an exhausted budget is final even if the stored flag was never set
        won = any(g.is_correct for g in guesses)
        completed = bool(persisted.get('completed')) or won or len(guesses) >= MAX_ATTEMPTS
        if completed:
            outcome = Outcome.WON.value if won else Outcome.LOST.value
        else:
            outcome = Outcome.PLAYING.value

        return SessionState(
            user_id=user_id,
            puzzle_date=puzzle_date,
            guesses=guesses,
            hint_index=self.hint_index_for(guesses, puzzle),
            completed=completed,
            first_guess_at=persisted.get('first_guess_at'),
            last_guess_at=persisted.get('last_guess_at'),
            time_spent_seconds=max(0, int(persisted.get('time_spent_seconds') or 0)),
            outcome=outcome,
            completed_at=persisted.get('completed_at')
        )

    def load_session(self, user_id: str, puzzle_date: str) -> Optional[Tuple[PuzzleDefinition, SessionState]]:
        """
        Fetch the puzzle and the user's stored progress for a day.

        Returns:
            (puzzle, session) or None if no puzzle exists for the date

        Raises:
            StorageError: If either store lookup fails
        """
        puzzle = self.get_puzzle(puzzle_date)
        if puzzle is None:
            return None

        persisted = self.storage.get_progress(user_id, puzzle_date)
        return puzzle, self.load_or_init(user_id, puzzle_date, puzzle, persisted)

    def is_valid_guess(self, session: SessionState, raw_guess: str) -> Tuple[bool, str]:
        """
        Validates a guess for a session.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if session.is_terminal or session.completed:
            return False, "Today's puzzle is already finished"

        if not isinstance(raw_guess, str) or not raw_guess.strip():
            return False, "Please enter a guess before submitting"

        if session.attempts >= MAX_ATTEMPTS:
            return False, "You've used every guess for today's puzzle"

        lowered = raw_guess.strip().lower()
        if any(g.guess.strip().lower() == lowered for g in session.guesses):
            return False, "You already tried that guess"

        return True, ""

    def submit_guess(self, session: SessionState, puzzle: PuzzleDefinition, raw_guess: str,
                     now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Processes a guess, persists progress and, on completion, updates stats.

        The session object is only updated once the progress upsert succeeds.

        Args:
            session: Session to play into
            puzzle: The day's puzzle
            raw_guess: Guess text as typed
            now: Submission time, defaults to the service clock

        Returns:
            Dict with ``success`` plus ``error`` on rejection, or ``result``,
            ``completed``, ``outcome`` and ``stats`` on success

        Raises:
            StorageError: If the progress or stats upsert fails
        """
        key = (session.user_id, session.puzzle_date)
        if not self._claim(key):
            return self._in_flight_response()

        try:
            return self._submit(session, puzzle, raw_guess, now)
        finally:
            self._release(key)

    def _submit(self, session: SessionState, puzzle: PuzzleDefinition, raw_guess: str,
                now: Optional[datetime] = None) -> Dict[str, Any]:
        """Validate, evaluate and persist a guess. The caller holds the in-flight key."""
        is_valid, error = self.is_valid_guess(session, raw_guess)
        if not is_valid:
            return {'success': False, 'error': error}

        next_state = self._play(session, puzzle, raw_guess.strip(), now or self.clock())

        try:
            self.storage.upsert_progress(next_state.to_progress_record())
        except StorageError as e:
            game_logger.logger.error(
                f"Progress save failed for user '{session.user_id}', puzzle {session.puzzle_date}: {e}"
            )
            raise

        for f in fields(SessionState):
            setattr(session, f.name, getattr(next_state, f.name))

        stats = None
        if session.completed:
            stats = self._finish(session)

        return {
            'success': True,
            'result': session.guesses[-1],
            'completed': session.completed,
            'outcome': session.outcome,
            'stats': stats
        }

    def play_guess(self, user_id: str, puzzle_date: str, raw_guess: str) -> Dict[str, Any]:
        """
        Load the (user, date) session and submit a guess into it.

        The in-flight key is held from the progress read through the upsert,
        so an overlapping request cannot play against a stale history.

        Returns:
            The ``submit_guess`` result with ``session`` and ``puzzle`` added,
            or an error dict when no puzzle exists for the date
        """
        key = (user_id, puzzle_date)
        if not self._claim(key):
            return self._in_flight_response()

        try:
            loaded = self.load_session(user_id, puzzle_date)
            if loaded is None:
                return {'success': False, 'error': 'No puzzle available for this date', 'not_found': True}

            puzzle, session = loaded
            outcome = self._submit(session, puzzle, raw_guess)
        finally:
            self._release(key)

        outcome['session'] = session
        outcome['puzzle'] = puzzle
        return outcome

    def get_public_state(self, session: SessionState, puzzle: PuzzleDefinition) -> Dict[str, Any]:
        """
        Client-facing session view. The answer and fact are only included
        once the session is finished.
        """
        hint_index = min(session.hint_index, puzzle.max_hint_index)
        finished = session.is_terminal

        return {
            'puzzle_date': session.puzzle_date,
            'category': puzzle.category,
            'hints': list(puzzle.hints[:hint_index + 1]),
            'current_hint': puzzle.hints[hint_index],
            'hint_index': hint_index,
            'total_hints': len(puzzle.hints),
            'guesses': [asdict(g) for g in session.guesses],
            'attempts': session.attempts,
            'max_attempts': MAX_ATTEMPTS,
            'remaining_attempts': max(MAX_ATTEMPTS - session.attempts, 0),
            'completed': session.completed,
            'outcome': session.outcome,
            'time_spent_seconds': session.time_spent_seconds,
            'answer': puzzle.answer if finished else None,
            'fact': puzzle.fact if finished else None
        }

    def _claim(self, key: Tuple[str, str]) -> bool:
        """Mark (user, date) as having a submission in progress. False if one already is."""
        with self._lock:
            if key in self._in_flight:
                return False
            self._in_flight.add(key)
            return True

    def _release(self, key: Tuple[str, str]):
        with self._lock:
            self._in_flight.discard(key)

    @staticmethod
    def _in_flight_response() -> Dict[str, Any]:
        return {
            'success': False,
            'error': 'A guess is already being submitted',
            'in_flight': True
        }

    def _play(self, session: SessionState, puzzle: PuzzleDefinition, guess: str,
              now: datetime) -> SessionState:
        """Next session state after an accepted guess."""
        result = evaluate(guess, puzzle.answer, puzzle.synonyms, puzzle.category)
        guesses: List[GuessResult] = session.guesses + [result]

        first_guess_at = session.first_guess_at or now.isoformat()
        elapsed = math.floor((now - _parse_timestamp(first_guess_at)).total_seconds())
        time_spent = max(session.time_spent_seconds, elapsed)

        # The winning guess does not reveal another hint
        hint_index = session.hint_index if result.is_correct else self.hint_index_for(guesses, puzzle)

        completed = result.is_correct or len(guesses) >= MAX_ATTEMPTS
        if completed:
            outcome = Outcome.WON.value if result.is_correct else Outcome.LOST.value
        else:
            outcome = Outcome.PLAYING.value

        return replace(
            session,
            guesses=guesses,
            hint_index=hint_index,
            completed=completed,
            first_guess_at=first_guess_at,
            last_guess_at=now.isoformat(),
            time_spent_seconds=time_spent,
            outcome=outcome,
            completed_at=now.isoformat() if completed else None
        )

    def _finish(self, session: SessionState):
        """Log the finished game and fold it into the user's stats."""
        won = session.outcome == Outcome.WON.value
        game_logger.log_game_event(
            session.puzzle_date,
            'game_won' if won else 'game_lost',
            session.user_id,
            attempts=session.attempts,
            time_spent_seconds=session.time_spent_seconds
        )

        outcome = GameOutcome(
            won=won,
            attempts=session.attempts,
            time_spent_seconds=session.time_spent_seconds,
            puzzle_date=session.puzzle_date,
            played_at=session.completed_at
        )
        try:
            return self.stats_service.record_outcome(session.user_id, outcome)
        except StorageError as e:
            game_logger.logger.error(f"Stats update failed for user '{session.user_id}': {e}")
            raise


# Global service instance
_game_service = None


def get_game_service() -> Optional[GameService]:
    """Get the global game service instance."""
    return _game_service


def initialize_game_service(storage, stats_service: StatsService,
                            clock: Optional[Callable[[], datetime]] = None) -> GameService:
    """Initialize the global game service instance."""
    global _game_service
    _game_service = GameService(storage, stats_service, clock)
    return _game_service
