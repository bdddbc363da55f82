"""
Main entry point for the XML batch converter.

This module initializes the application, loads configuration,
and starts the FastAPI server.
"""
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).parent

# Load environment variables from .env file before settings are read
_env_file = PROJECT_ROOT / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from core.config import get_settings
from core.exceptions import ConfigurationError
from core.logger import setup_logger

logger = setup_logger(__name__)


def main():
    """Main application entry point."""
    try:
        # Load and validate configuration
        try:
            settings = get_settings()
        except ValidationError as e:
            raise ConfigurationError("Invalid configuration", details={"errors": e.errors()})
        
        import uvicorn
        from app.api import app
        
        logger.info(f"Starting {settings.app_name}")
        logger.info(f"Remote transform URL: {settings.remote_url}")
        logger.info(f"Remote timeout: {settings.remote_timeout}s")
        logger.info(f"Repeating types: {', '.join(settings.repeating_types)}")
        logger.info(f"Log Level: {settings.log_level}")
        logger.info(f"Temp Storage: {settings.temp_storage_path}")
        
        logger.info(f"Starting server on {settings.host}:{settings.port}")
        
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower()
        )
    
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        if e.details:
            logger.error(f"Details: {e.details}")
        sys.exit(1)
    
    except Exception as e:
        logger.error(f"Failed to start application: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
