"""
Storage Service

Puzzle source, progress store and stats store. ``StorageService`` persists to
MongoDB; ``MemoryStorageService`` keeps the same contract in process memory
and is used for tests and when no database is configured.

Not-found lookups return ``None``. Driver failures are raised as
``StorageError`` so callers can tell them apart from validation problems.
"""

import copy
import threading
from typing import Any, Dict, Iterable, Optional, Tuple

from pymongo.errors import PyMongoError
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

from ..utils.game_logger import game_logger


class StorageError(Exception):
    """A puzzle, progress or stats store call failed."""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        message = f"Storage operation '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class StorageService:
    """
    MongoDB-backed storage for puzzles, per-user progress and user stats.
    """

    def __init__(self, mongo_uri: str, db_name: str = 'sense_game', client: Optional[MongoClient] = None):
        """
        Initialize the storage service with a MongoDB connection.

        Args:
            mongo_uri: MongoDB connection string
            db_name: Database holding the game collections
            client: Pre-built client, mainly for tests
        """
        self.mongo_uri = mongo_uri
        self.client = client if client is not None else MongoClient(mongo_uri, server_api=ServerApi('1'))
        self.db = self.client[db_name]
        self.puzzles_collection = self.db.daily_puzzles
        self.progress_collection = self.db.user_progress
        self.stats_collection = self.db.user_stats

        # Test connection
        try:
            self.client.admin.command('ping')
        except PyMongoError as e:
            game_logger.logger.error(f"MongoDB connection error: {e}")
            raise StorageError('ping', e)

        self.puzzles_collection.create_index("date", unique=True)
        self.progress_collection.create_index([("user_id", 1), ("puzzle_date", 1)], unique=True)
        self.stats_collection.create_index("user_id", unique=True)

    def get_puzzle(self, puzzle_date: str) -> Optional[Dict[str, Any]]:
        try:
            return self.puzzles_collection.find_one({"date": puzzle_date}, {"_id": 0})
        except PyMongoError as e:
            raise StorageError('get_puzzle', e)

    def upsert_puzzle(self, record: Dict[str, Any]) -> None:
        try:
            self.puzzles_collection.replace_one({"date": record["date"]}, dict(record), upsert=True)
        except PyMongoError as e:
            raise StorageError('upsert_puzzle', e)

    def seed_puzzles(self, records: Iterable[Dict[str, Any]]) -> int:
        """Upsert every seed puzzle; returns how many were written."""
        count = 0
        for record in records:
            self.upsert_puzzle(record)
            count += 1
        return count

    def get_progress(self, user_id: str, puzzle_date: str) -> Optional[Dict[str, Any]]:
        try:
            return self.progress_collection.find_one(
                {"user_id": user_id, "puzzle_date": puzzle_date}, {"_id": 0}
            )
        except PyMongoError as e:
            raise StorageError('get_progress', e)

    def upsert_progress(self, record: Dict[str, Any]) -> None:
        """Replace the progress row for (user_id, puzzle_date), creating it if needed."""
        try:
            self.progress_collection.replace_one(
                {"user_id": record["user_id"], "puzzle_date": record["puzzle_date"]},
                dict(record),
                upsert=True
            )
        except PyMongoError as e:
            raise StorageError('upsert_progress', e)

    def get_stats(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.stats_collection.find_one({"user_id": user_id}, {"_id": 0})
        except PyMongoError as e:
            raise StorageError('get_stats', e)

    def upsert_stats(self, record: Dict[str, Any]) -> None:
        try:
            self.stats_collection.replace_one({"user_id": record["user_id"]}, dict(record), upsert=True)
        except PyMongoError as e:
            raise StorageError('upsert_stats', e)


class MemoryStorageService:
    """In-process storage with the same contract as ``StorageService``."""

    def __init__(self, puzzles: Optional[Iterable[Dict[str, Any]]] = None):
        self._lock = threading.Lock()
        self._puzzles: Dict[str, Dict[str, Any]] = {}
        self._progress: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._stats: Dict[str, Dict[str, Any]] = {}
        if puzzles:
            self.seed_puzzles(puzzles)

    def get_puzzle(self, puzzle_date: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._puzzles.get(puzzle_date))

    def upsert_puzzle(self, record: Dict[str, Any]) -> None:
        with self._lock:
            self._puzzles[record["date"]] = copy.deepcopy(record)

    def seed_puzzles(self, records: Iterable[Dict[str, Any]]) -> int:
        count = 0
        for record in records:
            self.upsert_puzzle(record)
            count += 1
        return count

    def get_progress(self, user_id: str, puzzle_date: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._progress.get((user_id, puzzle_date)))

    def upsert_progress(self, record: Dict[str, Any]) -> None:
        with self._lock:
            self._progress[(record["user_id"], record["puzzle_date"])] = copy.deepcopy(record)

    def get_stats(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._stats.get(user_id))

    def upsert_stats(self, record: Dict[str, Any]) -> None:
        with self._lock:
            self._stats[record["user_id"]] = copy.deepcopy(record)


# Global service instance
_storage_service = None


def get_storage_service():
    """Get the global storage service instance."""
    return _storage_service


def initialize_storage_service(mongo_uri: Optional[str] = None, db_name: str = 'sense_game',
                               puzzles: Optional[Iterable[Dict[str, Any]]] = None):
    """
    Initialize the global storage service.

    Uses MongoDB when a URI is given, otherwise an in-memory store seeded
    with ``puzzles``.
    """
    global _storage_service
    if mongo_uri:
        _storage_service = StorageService(mongo_uri, db_name)
    else:
        _storage_service = MemoryStorageService(puzzles)
    return _storage_service
