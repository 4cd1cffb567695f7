"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import Category, FeedbackTier, MatchKind, Outcome, PuzzleDefinition, GuessResult, SessionState
from .user import GameOutcome, UserStatsRecord

__all__ = [
    'Category', 'FeedbackTier', 'MatchKind', 'Outcome',
    'PuzzleDefinition', 'GuessResult', 'SessionState',
    'GameOutcome', 'UserStatsRecord'
]
