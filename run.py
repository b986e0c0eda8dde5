#!/usr/bin/env python3
"""
Account Service Entry Point

Starts the FastAPI server (port 8090 by default, see ACCOUNT_SERVICE_API_PORT).
"""

import sys

from account_service.api import run_server
from account_service.config import get_config


if __name__ == "__main__":
    config = get_config()
    print(f"Starting {config.service_name} {config.service_version}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Account Service...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
