"""
Services Package

Contains all business logic and service classes.
"""

from .evaluator import evaluate
from .game_service import GameService, get_game_service, initialize_game_service
from .stats_service import StatsService, apply_outcome, get_stats_service, initialize_stats_service
from .storage_service import (
    StorageError, StorageService, MemoryStorageService, get_storage_service, initialize_storage_service
)

__all__ = [
    'evaluate',
    'GameService', 'get_game_service', 'initialize_game_service',
    'StatsService', 'apply_outcome', 'get_stats_service', 'initialize_stats_service',
    'StorageError', 'StorageService', 'MemoryStorageService',
    'get_storage_service', 'initialize_storage_service'
]
