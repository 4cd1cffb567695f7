"""
SENSE Daily Puzzle Server - Main Entry Point

This is the main entry point for the daily puzzle server.
It initializes all services and starts the Flask application.
"""

from sense import create_app
from sense.config import Config, PUZZLES
from sense.services.game_service import initialize_game_service
from sense.services.stats_service import initialize_stats_service
from sense.services.storage_service import StorageError, initialize_storage_service
from sense.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    try:
        print("Initializing services...")

        # Initialize storage: MongoDB when configured, in-memory otherwise
        if Config.MONGO_URI:
            storage = initialize_storage_service(Config.MONGO_URI, Config.MONGO_DB_NAME)
            print("✓ MongoDB storage initialized successfully")
            if Config.SEED_PUZZLES:
                seeded = storage.seed_puzzles(PUZZLES)
                print(f"✓ Seeded {seeded} puzzles")
        else:
            storage = initialize_storage_service(puzzles=PUZZLES)
            print("✗ MongoDB URI not configured - using in-memory storage (progress is lost on restart)")
            game_logger.logger.warning("MONGO_URI not set; running with in-memory storage")

        stats_service = initialize_stats_service(storage)
        print("✓ Stats service initialized successfully")

        initialize_game_service(storage, stats_service)
        print("✓ Game service initialized successfully")

        print("Creating Flask application...")
        app = create_app(Config)
        print("✓ Flask application created successfully")

        game_logger.logger.info("SENSE Server Starting")

        print(f"\nStarting SENSE Server on {Config.HOST}:{Config.PORT}")
        print(f"Debug mode: {Config.DEBUG}")
        print("=" * 50)

        app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("SENSE Server shutting down (KeyboardInterrupt)")
    except StorageError as e:
        print(f"Error connecting to storage: {e}")
        game_logger.logger.error(f"Error connecting to storage: {e}")
        raise
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
