# cms_oauth_proxy/cli/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

# This cli/config.py file is at <project>/cms_oauth_proxy/cli/config.py
# Three .parent calls navigate to the project root directory
project_root = Path(__file__).parent.parent.parent.resolve()

# Load environment variables from .env file, overriding system environment variables
load_dotenv(dotenv_path=project_root / '.env', override=True)

# Base URL of a running proxy, used by the probe command
PROXY_CLI_API_BASE_URL = os.getenv("PROXY_CLI_API_BASE_URL", "http://127.0.0.1:8000")

# Development server defaults for the serve command
PROXY_CLI_SERVER_HOST = os.getenv("DEV_SERVER_HOST", "127.0.0.1")
PROXY_CLI_SERVER_PORT = int(os.getenv("DEV_SERVER_PORT", "8000"))
