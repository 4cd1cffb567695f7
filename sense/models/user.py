"""
User Data Models

Contains the per-user statistics record and the outcome folded into it.
"""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional


@dataclass
class GameOutcome:
    """Result of one completed daily session."""
    won: bool
    attempts: int
    time_spent_seconds: float
    puzzle_date: str
    played_at: Optional[str] = None


@dataclass
class UserStatsRecord:
    """User statistics data model, aggregated across puzzle dates."""
    user_id: str
    current_streak: int = 0
    max_streak: int = 0
    total_played: int = 0
    total_wins: int = 0
    total_losses: int = 0
    win_rate: float = 0.0
    average_attempts: float = 0.0
    best_attempts: Optional[int] = None
    total_time_spent_seconds: int = 0
    last_outcome: Optional[str] = None
    last_played_at: Optional[str] = None
    last_attempt_count: Optional[int] = None
    last_puzzle_date: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "UserStatsRecord":
        """Build from a stored document, ignoring storage-only keys such as ``_id``."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in record.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
