"""
Utilities Package

Contains text scoring, helper functions, decorators and the game logger.
"""

from .decorators import require_user
from .helpers import get_user_identity, get_today_date, generate_share_text
from .game_logger import game_logger

__all__ = ['require_user', 'get_user_identity', 'get_today_date', 'generate_share_text', 'game_logger']
