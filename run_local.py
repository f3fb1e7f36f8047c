#!/usr/bin/env python3
"""
Local development runner.

Starts the API with auto-reload. Postgres and Redis are expected at the
URLs configured in the environment (or .env).
"""

import uvicorn


def main():
    """Run the application locally"""
    print("🚀 Starting SocialNet API")
    print("📖 API docs are served at http://localhost:8000/docs when DEBUG=true")
    print("-" * 50)

    # Run the server
    uvicorn.run(
        "socialnet.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Auto-reload on code changes
        log_level="info",
    )


if __name__ == "__main__":
    main()
