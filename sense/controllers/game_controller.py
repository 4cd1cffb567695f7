"""
Game Controller

Handles all puzzle, guess, stats and share HTTP endpoints.
"""

from dataclasses import asdict
from datetime import date

from flask import Blueprint, current_app, jsonify, request

from ..config.game_settings import MAX_ATTEMPTS
from ..models.game import Outcome
from ..services.game_service import get_game_service
from ..services.stats_service import get_stats_service
from ..services.storage_service import StorageError
from ..utils.decorators import require_user
from ..utils.game_logger import game_logger
from ..utils.helpers import generate_share_text, get_today_date

game_bp = Blueprint('game', __name__)


def _service_unavailable(name: str):
    return jsonify({
        'success': False,
        'error': f'{name} service unavailable'
    }), 500


def _resolve_date(puzzle_date: str):
    """Return the ISO day for a path segment ('today' or YYYY-MM-DD), or None if malformed."""
    if puzzle_date == 'today':
        return get_today_date()
    try:
        return date.fromisoformat(puzzle_date).isoformat()
    except ValueError:
        return None


def _error(action: str, message: str, status: int, puzzle_date=None, **extra):
    error_response = {'success': False, 'error': message, 'user_id': request.user_id, **extra}
    game_logger.log_server_response(request, action, False, error_response, puzzle_date)
    return jsonify(error_response), status


def _storage_failure(action: str, error: StorageError, puzzle_date=None):
    game_logger.log_error(request, error, action, puzzle_date)
    return _error(action, 'Storage is unavailable right now. Please try again.', 503, puzzle_date)


@game_bp.route('/puzzle/<puzzle_date>', methods=['GET'])
@require_user
def get_state(puzzle_date):
    """Get the caller's session for a puzzle day ('today' or YYYY-MM-DD)."""
    resolved = _resolve_date(puzzle_date)
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        game_logger.log_user_action(request, 'get_state', resolved)

        if resolved is None:
            return _error('get_state', 'Invalid puzzle date', 400)

        loaded = game_service.load_session(request.user_id, resolved)
        if loaded is None:
            return _error('get_state', 'No puzzle available for this date', 404, resolved)

        puzzle, session = loaded
        response_data = {
            'success': True,
            'user_id': request.user_id,
            'state': game_service.get_public_state(session, puzzle)
        }

        game_logger.log_server_response(
            request, 'get_state', True, response_data, resolved,
            attempts=session.attempts, completed=session.completed
        )
        return jsonify(response_data)

    except StorageError as e:
        return _storage_failure('get_state', e, resolved)
    except Exception as e:
        game_logger.log_error(request, e, 'get_state', resolved)
        return _error('get_state', str(e), 500, resolved)


@game_bp.route('/puzzle/<puzzle_date>/guess', methods=['POST'])
@require_user
def make_guess(puzzle_date):
    """Submit a guess for evaluation."""
    resolved = _resolve_date(puzzle_date)
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        if resolved is None:
            return _error('submit_guess', 'Invalid puzzle date', 400)

        data = request.get_json(silent=True)
        if not data or 'guess' not in data:
            return _error('submit_guess', 'Guess is required', 400, resolved)

        guess = data['guess']
        if not isinstance(guess, str):
            return _error('submit_guess', 'Guess must be text', 400, resolved)

        game_logger.log_user_action(
            request, 'submit_guess', resolved,
            guess=guess, guess_length=len(guess)
        )

        outcome = game_service.play_guess(request.user_id, resolved, guess)

        if not outcome['success']:
            if outcome.get('not_found'):
                status = 404
            elif outcome.get('in_flight'):
                status = 409
            else:
                status = 400
            return _error('submit_guess', outcome['error'], status, resolved)

        session, puzzle = outcome['session'], outcome['puzzle']
        stats = outcome['stats']
        response_data = {
            'success': True,
            'user_id': request.user_id,
            'result': asdict(outcome['result']),
            'state': game_service.get_public_state(session, puzzle),
            'stats': stats.to_dict() if stats else None
        }

        game_logger.log_server_response(
            request, 'submit_guess', True, response_data, resolved,
            tier=outcome['result'].tier, attempts=session.attempts, completed=session.completed
        )
        return jsonify(response_data)

    except StorageError as e:
        return _storage_failure('submit_guess', e, resolved)
    except Exception as e:
        game_logger.log_error(request, e, 'submit_guess', resolved)
        return _error('submit_guess', str(e), 500, resolved)


@game_bp.route('/puzzle/<puzzle_date>/share', methods=['GET'])
@require_user
def get_share_text(puzzle_date):
    """Plain-text result summary for a finished puzzle."""
    resolved = _resolve_date(puzzle_date)
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        game_logger.log_user_action(request, 'get_share_text', resolved)

        if resolved is None:
            return _error('get_share_text', 'Invalid puzzle date', 400)

        loaded = game_service.load_session(request.user_id, resolved)
        if loaded is None:
            return _error('get_share_text', 'No puzzle available for this date', 404, resolved)

        _, session = loaded
        if not session.is_terminal:
            return _error('get_share_text', 'Finish the puzzle before sharing', 409, resolved)

        text = generate_share_text(
            session.attempts, MAX_ATTEMPTS, session.guesses,
            session.outcome == Outcome.WON.value, resolved,
            current_app.config.get('SHARE_URL')
        )
        response_data = {'success': True, 'user_id': request.user_id, 'text': text}

        game_logger.log_server_response(request, 'get_share_text', True, response_data, resolved)
        return jsonify(response_data)

    except StorageError as e:
        return _storage_failure('get_share_text', e, resolved)
    except Exception as e:
        game_logger.log_error(request, e, 'get_share_text', resolved)
        return _error('get_share_text', str(e), 500, resolved)


@game_bp.route('/stats', methods=['GET'])
@require_user
def get_stats():
    """Get the caller's cumulative statistics."""
    try:
        stats_service = get_stats_service()
        if not stats_service:
            return _service_unavailable('Stats')

        game_logger.log_user_action(request, 'get_stats')

        stats = stats_service.get_stats(request.user_id)
        response_data = {
            'success': True,
            'user_id': request.user_id,
            'stats': stats.to_dict() if stats else None
        }

        game_logger.log_server_response(request, 'get_stats', True, response_data)
        return jsonify(response_data)

    except StorageError as e:
        return _storage_failure('get_stats', e)
    except Exception as e:
        game_logger.log_error(request, e, 'get_stats')
        return _error('get_stats', str(e), 500)


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'success': True,
        'status': 'healthy',
        'game_service': get_game_service() is not None,
        'stats_service': get_stats_service() is not None
    })
