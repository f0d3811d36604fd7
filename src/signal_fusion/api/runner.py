#!/usr/bin/env python3
"""FastAPI server runner — serves diagnostics while the engine consumes a replay."""

import argparse
import asyncio

import structlog
import uvicorn

from signal_fusion.api.app import create_app
from signal_fusion.config.loader import load_config
from signal_fusion.logging.setup import setup_logging
from signal_fusion.orchestrator.runner import build_engine, replay, run_loop

logger = structlog.get_logger("api")


def main(config_path=None, replay_path=None, host="0.0.0.0", port=8000):
    """Run the FastAPI server."""
    config = load_config(config_path)
    setup_logging(level=config.logging.level, log_format=config.logging.format)
    engine = build_engine(config)
    app = create_app(engine)

    if replay_path is not None:
        @app.on_event("startup")
        async def start_feed():
            app.state.feed = asyncio.create_task(run_loop(engine, replay(replay_path)))

    logger.info("server_starting", host=host, port=port)

    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_config=None  # Use our structlog setup
        )
    except Exception as e:
        logger.error("server_failed", error=str(e))
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Signal fusion diagnostics server")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--replay", default=None, help="JSON-lines file of indicator snapshots")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()
    main(config_path=args.config, replay_path=args.replay, port=args.port)
