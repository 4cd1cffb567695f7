"""
Game Configuration Constants Module

This module defines all game configuration constants: the attempt budget,
the evaluation thresholds and confidences, and the seed puzzle calendar.
All game parameters are centralized here to enable easy tuning.
"""

import json
import os
from datetime import date
from typing import Any, Dict, List, Final, Tuple

# Core Game Configuration Constants
MAX_ATTEMPTS: Final[int] = 6
"""
Maximum number of guesses allowed per daily puzzle.
Type: Final[int] - Immutable to prevent accidental modification
"""

CATEGORIES: Final[Tuple[str, ...]] = ('taste', 'smell', 'texture')

FALLBACK_HINT: Final[str] = 'No hints available yet.'

SHARE_TITLE: Final[str] = 'SENSE'

# Evaluation confidences (fixed scores reported for non-fuzzy matches)
SYNONYM_SIMILARITY: Final[float] = 0.92
CATEGORY_SIMILARITY: Final[float] = 0.70
SUBSTRING_SIMILARITY: Final[float] = 0.75
CATEGORY_TOKEN_SIMILARITY: Final[float] = 0.65

# Fuzzy match cutoffs, inclusive
STRONG_FUZZY_THRESHOLD: Final[float] = 0.82
WEAK_FUZZY_THRESHOLD: Final[float] = 0.68


def _load_puzzles() -> List[Dict[str, Any]]:
    """
    Load the seed puzzle calendar from puzzles.json.

    Returns:
        List[Dict]: Puzzle records keyed by ISO date

    Raises:
        FileNotFoundError: If puzzles.json file is not found
        ValueError: If the JSON is malformed or a puzzle is invalid
    """
    config_dir = os.path.dirname(os.path.abspath(__file__))
    json_file_path = os.path.join(config_dir, 'puzzles.json')

    try:
        with open(json_file_path, 'r', encoding='utf-8') as f:
            puzzles = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Puzzle file not found: {json_file_path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in puzzles.json: {e}")

    if not isinstance(puzzles, list):
        raise ValueError("JSON file must contain an array of puzzles")

    validate_puzzle_definitions(puzzles)
    return puzzles


def validate_puzzle_definitions(puzzles: List[Dict[str, Any]]) -> bool:
    """
    Validates a list of raw puzzle records.

    Checks performed on every record:
    1. Date validation: ``date`` is an ISO calendar day, unique in the list
    2. Answer validation: ``answer`` is non-empty once normalized
    3. Category validation: ``category`` is one of CATEGORIES
    4. Shape validation: ``hints`` and ``synonyms`` are lists of strings

    Returns:
        bool: True if every record passes

    Raises:
        ValueError: If any validation check fails with detailed error message
    """
    from ..utils.text import normalize

    seen_dates = set()

    for index, puzzle in enumerate(puzzles):
        if not isinstance(puzzle, dict):
            raise ValueError(f"Puzzle at index {index} is not an object")

        puzzle_date = puzzle.get('date')
        try:
            date.fromisoformat(puzzle_date)
        except (TypeError, ValueError):
            raise ValueError(f"Puzzle at index {index} has invalid date {puzzle_date!r}")

        if puzzle_date in seen_dates:
            raise ValueError(f"Duplicate puzzle date: {puzzle_date}")
        seen_dates.add(puzzle_date)

        answer = puzzle.get('answer')
        if not isinstance(answer, str) or not normalize(answer):
            raise ValueError(f"Puzzle {puzzle_date} has an empty answer")

        if puzzle.get('category') not in CATEGORIES:
            raise ValueError(f"Puzzle {puzzle_date} has unknown category {puzzle.get('category')!r}")

        for field in ('hints', 'synonyms'):
            values = puzzle.get(field, [])
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise ValueError(f"Puzzle {puzzle_date} field '{field}' must be a list of strings")

    return True


# Seed puzzle calendar loaded from JSON file
PUZZLES: Final[List[Dict[str, Any]]] = _load_puzzles()


if __name__ == "__main__":

    try:
        validate_puzzle_definitions(PUZZLES)
        print(f" {len(PUZZLES)} seed puzzles passed validation")
    except ValueError as config_error:
        print(f" Configuration validation failed: {config_error}")
        exit(1)
