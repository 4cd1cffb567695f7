"""
Game Data Models

Contains all puzzle and session data structures and enums.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..config.game_settings import FALLBACK_HINT


class Category(Enum):
    """Sensory category a daily answer belongs to."""
    TASTE = "taste"
    SMELL = "smell"
    TEXTURE = "texture"


class FeedbackTier(Enum):
    """Coarse grade shown to the player for each guess."""
    CORRECT = "correct"
    CLOSE = "close"
    NEUTRAL = "neutral"


class MatchKind(Enum):
    """Which evaluation rule produced the feedback."""
    EXACT = "exact"
    SYNONYM = "synonym"
    CATEGORY = "category"
    SUBSTRING = "substring"
    FUZZY = "fuzzy"
    NONE = "none"


class Outcome(Enum):
    """Session lifecycle state."""
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class PuzzleDefinition:
    """One day's puzzle. Read-only to the game core."""
    date: str
    answer: str
    category: str
    synonyms: Tuple[str, ...] = ()
    hints: Tuple[str, ...] = (FALLBACK_HINT,)
    fact: str = ""

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PuzzleDefinition":
        """
        Build a puzzle from a stored record, substituting a placeholder hint when none exist.

        Raises:
            ValueError: If the category is not a known sense
        """
        hints = tuple(record.get('hints') or ()) or (FALLBACK_HINT,)
        return cls(
            date=record['date'],
            answer=record['answer'],
            category=Category(record.get('category')).value,
            synonyms=tuple(record.get('synonyms') or ()),
            hints=hints,
            fact=record.get('fact') or ""
        )

    @property
    def max_hint_index(self) -> int:
        return max(len(self.hints) - 1, 0)


@dataclass(frozen=True)
class GuessResult:
    """Evaluated guess. Tier and match kind are stored as enum values for JSON serialization."""
    guess: str
    tier: str
    match_kind: str
    similarity: float
    explanation: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "GuessResult":
        return cls(
            guess=record['guess'],
            tier=record.get('feedback') or record.get('tier') or FeedbackTier.NEUTRAL.value,
            match_kind=record.get('match_type') or record.get('match_kind') or MatchKind.NONE.value,
            similarity=float(record.get('similarity') or 0.0),
            explanation=record.get('explanation') or ""
        )

    def to_record(self) -> Dict[str, Any]:
        """Shape stored in the progress store's per-guess feedback list."""
        return {
            'guess': self.guess,
            'feedback': self.tier,
            'match_type': self.match_kind,
            'similarity': self.similarity,
            'explanation': self.explanation
        }

    @property
    def is_correct(self) -> bool:
        return self.tier == FeedbackTier.CORRECT.value


@dataclass
class SessionState:
    """Per-user, per-day game session."""
    user_id: str
    puzzle_date: str
    guesses: List[GuessResult] = field(default_factory=list)
    hint_index: int = 0
    completed: bool = False
    first_guess_at: Optional[str] = None  # ISO-8601 UTC
    last_guess_at: Optional[str] = None
    time_spent_seconds: int = 0
    outcome: str = Outcome.PLAYING.value
    completed_at: Optional[str] = None

    @property
    def attempts(self) -> int:
        return len(self.guesses)

    @property
    def is_terminal(self) -> bool:
        return self.outcome != Outcome.PLAYING.value

    def to_progress_record(self) -> Dict[str, Any]:
        """Shape upserted into the progress store, keyed by (user_id, puzzle_date)."""
        return {
            'user_id': self.user_id,
            'puzzle_date': self.puzzle_date,
            'guesses': [g.guess for g in self.guesses],
            'guess_feedback': [g.to_record() for g in self.guesses],
            'completed': self.completed,
            'attempts': self.attempts,
            'hint_index': self.hint_index,
            'first_guess_at': self.first_guess_at,
            'last_guess_at': self.last_guess_at,
            'time_spent_seconds': self.time_spent_seconds,
            'completed_at': self.completed_at
        }
