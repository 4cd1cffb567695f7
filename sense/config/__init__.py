"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- game_settings.py: Game rules, evaluation thresholds and seed puzzles
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .game_settings import (
    MAX_ATTEMPTS, CATEGORIES, FALLBACK_HINT, PUZZLES, validate_puzzle_definitions
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Game rules
    'MAX_ATTEMPTS', 'CATEGORIES', 'FALLBACK_HINT', 'PUZZLES', 'validate_puzzle_definitions'
]
