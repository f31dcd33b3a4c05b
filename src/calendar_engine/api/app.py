import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from ..config import EngineSettings
from .routes import calendar_bp

logger = logging.getLogger(__name__)


def load_environment(search_paths: Optional[list] = None) -> Optional[Path]:
    """
    Load environment variables from the first .env file found.

    Args:
        search_paths: Candidate .env paths (defaults to the working directory)

    Returns:
        The path that was loaded, or None
    """
    env_paths = search_paths or [Path.cwd() / ".env"]
    for env_path in env_paths:
        env_path = Path(env_path)
        if env_path.exists():
            load_dotenv(env_path)
            logger.info(f"✓ Loaded environment variables from {env_path}")
            return env_path

    logger.debug(f"No .env file found in {[str(p) for p in env_paths]}")
    return None


def create_app(settings: Optional[EngineSettings] = None) -> Flask:
    """
    Build the calendar engine web app.

    Args:
        settings: Engine settings; read from the environment when omitted

    Returns:
        Configured Flask application
    """
    if settings is None:
        load_environment()
        settings = EngineSettings.from_env()

    app = Flask(__name__)
    app.config['ENGINE_SETTINGS'] = settings
    app.register_blueprint(calendar_bp)

    @app.route("/")
    def index():
        return jsonify({"service": "calendar-engine", "health": "/calendar/health"})

    logger.info(f"Calendar engine ready (max occurrences {settings.max_occurrences}, "
                f"timezone {settings.timezone})")
    return app


def main():
    """Run the development server."""
    load_environment()
    logging.basicConfig(level=os.getenv("CALENDAR_LOG_LEVEL", "INFO").upper())

    app = create_app(EngineSettings.from_env())

    host = os.getenv("CALENDAR_HOST", "0.0.0.0")
    port = int(os.getenv("CALENDAR_PORT", "5040"))
    debug = os.getenv("CALENDAR_DEBUG", "False").lower() in ("true", "1", "yes")

    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
