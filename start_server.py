#!/usr/bin/env python3
"""
Startup script for the TaskFlow backend
This script starts the FastAPI server with the configured host, port and log level
"""

import uvicorn

from app.config.settings import settings


def main():
    server = settings.SERVER

    print("Starting TaskFlow Backend Server...")
    print(f"Host: {server['host']}")
    print(f"Port: {server['port']}")
    print(f"Reload: {server['reload']}")
    print("=" * 50)

    # Start the server
    uvicorn.run(
        "main:app",
        host=server['host'],
        port=server['port'],
        reload=server['reload'],
        log_level=server['log_level'].lower()
    )


if __name__ == "__main__":
    main()
