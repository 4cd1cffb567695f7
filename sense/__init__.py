"""
SENSE Daily Puzzle Server Application Package

A daily sensory word puzzle: players guess a hidden taste, smell or texture
word, get graded feedback for each guess and unlock hints as they go.
"""

from flask import Flask
from flask_cors import CORS
from .config import Config


def create_app(config_class=Config):
    """
    Application factory pattern for creating Flask app instances.

    Services are initialized separately (see ``main.py``) so tests can
    wire their own storage.

    Args:
        config_class: Configuration class to use

    Returns:
        Flask application instance with all extensions initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app, expose_headers=['X-User-Id'])

    # Register blueprints
    from .controllers.game_controller import game_bp

    app.register_blueprint(game_bp, url_prefix='/api')

    return app
