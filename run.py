#!/usr/bin/env python3
"""
dKin Butterfly Club survey service - Main Runner

MVC Architecture:
- Models: Pydantic schemas (butterfly_survey/models/)
- Views: Flask routes, JSON API & templates (butterfly_survey/views/, butterfly_survey/templates/)
- Controllers: Orchestration (butterfly_survey/controllers/)
- Services: SQLAlchemy repositories (butterfly_survey/services/)

Usage:
    python run.py              # Start the web server
    python run.py --port 5000  # Custom port
    python run.py --debug      # Debug mode
"""
import argparse
import logging
import os
import sys

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

load_dotenv()


def setup_logging(level: str = "INFO", debug: bool = False):
    """Configure logging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(__name__)


def main():
    """Main entry point."""
    from butterfly_survey.domain.errors import ConfigurationError
    from config import get_settings

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(f"Configuration Error: {exc}", file=sys.stderr)
        sys.exit(1)

    parser = argparse.ArgumentParser(
        description='Butterfly survey web application',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run.py                    # Start server on the configured port (3000)
    python run.py --port 5000        # Start on port 5000
    python run.py --debug            # Enable debug mode
    python run.py --host 0.0.0.0     # Listen on all interfaces

Configuration (environment or .env):
    DATABASE_URL        SQLAlchemy URL (default sqlite:///mySurveyDB.db)
    CORS_ORIGINS        Comma-separated origins allowed on /api/*
    MAINTENANCE_MODE    Serve a 503 page instead of the form
        """
    )

    parser.add_argument(
        '--host',
        default=settings.host,
        help=f'Host to bind to (default: {settings.host})'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=settings.port,
        help=f'Port to listen on (default: {settings.port})'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        default=settings.debug,
        help='Enable debug mode'
    )

    args = parser.parse_args()

    logger = setup_logging(settings.log_level, args.debug)

    logger.info("=" * 60)
    logger.info("%s v%s", settings.app_name, settings.app_version)
    logger.info("=" * 60)
    logger.info("Environment: %s", settings.environment)
    logger.info("Database: %s", settings.database_url)
    logger.info("Host: %s", args.host)
    logger.info("Port: %s", args.port)
    logger.info("Debug: %s", args.debug)
    logger.info("Maintenance mode: %s", "ON" if settings.maintenance_mode else "OFF")
    logger.info("=" * 60)

    from butterfly_survey.controllers import SurveyController
    from butterfly_survey.views import create_app

    controller = SurveyController(settings=settings)
    app = create_app(controller)

    logger.info("Starting server at http://%s:%s", args.host, args.port)

    try:
        app.run(
            host=args.host,
            port=args.port,
            debug=args.debug
        )
    finally:
        controller.close()


if __name__ == '__main__':
    main()
