#!/usr/bin/env python3
"""
Voice Assistant chat proxy — Entry Point

Loads .env, configures logging and serves the Flask app from app.py
(POST /api/chat plus /health/live and /health/ready).

Start:
    python3 server.py
"""

import logging
import os
import signal
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables before the config singleton is built
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

from config.loader import config  # noqa: E402
from app import create_app  # noqa: E402

logging.basicConfig(
    level=getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO),
)
logger = logging.getLogger(__name__)

app = create_app()


if __name__ == "__main__":
    port = int(config.get("server.port", 3000))
    host = config.get("server.host", "127.0.0.1")

    def _handle_sigterm(signum, frame):
        logger.info("SIGTERM received — shutting down.")
        os._exit(0)

    signal.signal(signal.SIGTERM, _handle_sigterm)

    if not os.getenv("HF_TOKEN"):
        logger.warning("HF_TOKEN not set — /api/chat will answer 500 until it is")

    logger.info(f"Voice assistant proxy starting on port {port}")
    logger.info(f"  Chat      → http://localhost:{port}/api/chat")
    logger.info(f"  Health    → http://localhost:{port}/health/ready")

    app.run(host=host, port=port, debug=config.is_development(), threaded=True)
