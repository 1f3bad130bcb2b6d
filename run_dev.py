import uvicorn
from dotenv import load_dotenv
import os
from pathlib import Path
import logging

# Configure logging before any application imports to ensure visibility
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s RUN_DEV.PY - [%(levelname)s] - %(message)s'
)
logger = logging.getLogger("run_dev_script")

if __name__ == "__main__":
    # Determine project root and .env file location
    project_root = Path(__file__).parent.resolve()
    dotenv_path_explicit = project_root / ".env"

    logger.info(f"Project root (derived from __file__): {project_root}")

    # Load environment variables from .env file if it exists
    if dotenv_path_explicit.exists():
        logger.info(f".env file FOUND at: {dotenv_path_explicit}")
        load_dotenv(dotenv_path=dotenv_path_explicit, override=True)
    else:
        logger.warning(f".env file NOT FOUND at: {dotenv_path_explicit}. "
                      "Will rely on OS environment variables.")

    # Log key environment variables for verification; secrets are masked
    _client_id = os.getenv('OAUTH_CLIENT_ID') or os.getenv('GITHUB_CLIENT_ID')
    _secret_val = os.getenv('OAUTH_CLIENT_SECRET') or os.getenv('GITHUB_CLIENT_SECRET')
    logger.info(f"OAuth client ID: {_client_id}")
    logger.info(f"OAuth client secret: {'********' if _secret_val else 'None'}")
    logger.info(f"Public base URL: {os.getenv('PUBLIC_BASE_URL') or os.getenv('PRODUCTION_URL')}")

    # Configure development server settings
    host = os.getenv("DEV_SERVER_HOST", "127.0.0.1")
    port = int(os.getenv("DEV_SERVER_PORT", "8000"))
    uvicorn_log_level = os.getenv("DEV_SERVER_LOG_LEVEL", "info").lower()

    # Convert string environment variables to boolean values
    debug_mode_env_val = os.getenv("DEBUG_MODE", "False").lower()
    debug_mode_bool_for_reload = debug_mode_env_val in ["true", "1", "yes", "on", "t"]
    reload_env_val = os.getenv("DEV_SERVER_RELOAD", str(debug_mode_bool_for_reload)).lower()
    reload_bool = reload_env_val in ["true", "1", "yes", "on", "t"]

    logger.info(f"Starting Uvicorn server on {host}:{port}")
    logger.info(f"Reload: {reload_bool}")
    logger.info("App factory: cms_oauth_proxy.main:create_app")

    # The factory raises ConfigurationError on missing credentials, so the
    # server exits instead of serving requests it cannot complete.
    uvicorn.run(
        "cms_oauth_proxy.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=uvicorn_log_level,
        reload=reload_bool
    )
