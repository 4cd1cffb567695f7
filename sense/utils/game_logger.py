"""
Game Logger Module for the SENSE Server

This module provides structured logging for player actions, server responses,
and game events (wins, losses) as JSON lines in a dated log file.
"""

import logging
import json
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from ..config.app_config import Config


class GameLogger:
    """
    Centralized logging system for the daily puzzle server.

    Features:
    - Player action tracking with IP and device user identification
    - Server response logging with answer redaction
    - Game event logging
    - JSON structured logs for easy parsing
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = getattr(logging, str(level).upper(), logging.INFO)

        # Setup main game logger
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Setup the main game logger with file and console handlers."""
        logger = logging.getLogger('sense_game')
        logger.setLevel(self.level)

        # Prevent duplicate handlers
        if logger.handlers:
            logger.handlers.clear()

        log_file = self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(self.level)

        # Only warnings and errors reach the console
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)

        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        return logger

    def _get_user_identity(self, request) -> Dict[str, Optional[str]]:
        """Extract user identity information from request."""
        return {
            'user_ip': getattr(request, 'remote_addr', None) or 'unknown',
            'user_id': getattr(request, 'user_id', None)
        }

    def _create_log_entry(self,
                          event_type: str,
                          action: str,
                          user_info: Dict[str, Optional[str]],
                          details: Dict[str, Any]) -> str:
        """Create a structured log entry."""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details
        }
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def log_user_action(self,
                        request,
                        action: str,
                        puzzle_date: Optional[str] = None,
                        **kwargs):
        """
        Log player actions with full context.

        Args:
            request: Flask request object
            action: Type of action (e.g., 'get_state', 'submit_guess', 'get_stats')
            puzzle_date: Puzzle day if applicable
            **kwargs: Additional details to log
        """
        details = {
            'puzzle_date': puzzle_date,
            'endpoint': request.endpoint,
            'method': request.method,
            'url': request.url,
            **kwargs
        }

        log_message = self._create_log_entry('USER_ACTION', action, self._get_user_identity(request), details)
        self.logger.info(log_message)

    def log_server_response(self,
                            request,
                            action: str,
                            success: bool,
                            response_data: Dict[str, Any],
                            puzzle_date: Optional[str] = None,
                            **kwargs):
        """
        Log server responses with full context.

        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client
            puzzle_date: Puzzle day if applicable
            **kwargs: Additional details to log
        """
        details = {
            'puzzle_date': puzzle_date,
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': self._sanitize_response_data(response_data),
            **kwargs
        }

        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        log_message = self._create_log_entry(event_type, action, self._get_user_identity(request), details)

        if success:
            self.logger.info(log_message)
        else:
            self.logger.error(log_message)

    def log_game_event(self,
                       puzzle_date: Optional[str],
                       event: str,
                       user_id: Optional[str],
                       **kwargs):
        """
        Log game-specific events (wins, losses, etc.).

        Args:
            puzzle_date: Puzzle day
            event: Type of game event (e.g., 'game_won', 'game_lost')
            user_id: Device user identifier
            **kwargs: Additional game details
        """
        user_info = {'user_ip': None, 'user_id': user_id}
        details = {'puzzle_date': puzzle_date, **kwargs}

        log_message = self._create_log_entry('GAME_EVENT', event, user_info, details)
        self.logger.info(log_message)

    def log_error(self,
                  request,
                  error: Exception,
                  action: str,
                  puzzle_date: Optional[str] = None):
        """
        Log errors with full context.

        Args:
            request: Flask request object
            error: Exception that occurred
            action: Action that was being performed
            puzzle_date: Puzzle day if applicable
        """
        details = {
            'puzzle_date': puzzle_date,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }

        log_message = self._create_log_entry('ERROR', action, self._get_user_identity(request), details)
        self.logger.error(log_message)

    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Condense session state and keep the answer out of the log."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = data.copy()

        if 'state' in sanitized and isinstance(sanitized['state'], dict):
            state = sanitized['state']
            sanitized['state'] = {
                'attempts': state.get('attempts'),
                'max_attempts': state.get('max_attempts'),
                'hint_index': state.get('hint_index'),
                'completed': state.get('completed'),
                'outcome': state.get('outcome'),
                'answer_revealed': state.get('answer') is not None
            }

        return sanitized


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
