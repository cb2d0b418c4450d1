"""Run the SourceValidator API under uvicorn.

Usage:
    python scripts/serve.py                       # 0.0.0.0:8000
    python scripts/serve.py --port 9000 --reload  # dev mode
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from sourcevalidator.config import get_config


def main():
    parser = argparse.ArgumentParser(description="Serve the SourceValidator API")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    args = parser.parse_args()

    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    uvicorn.run(
        "sourcevalidator.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
