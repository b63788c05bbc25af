#!/usr/bin/env python3
"""
KV-Session Server Entry Point

This is the main entry point for starting the KV-Session server.

Usage:
    python -m kvsession.server                    # Ephemeral port on 0.0.0.0
    python -m kvsession.server --port 8080        # Fixed port
    python -m kvsession.server --host 127.0.0.1   # Custom host
    python -m kvsession.server --debug            # Enable debug logging

Environment Variables:
    KV_SESSION_HOST       - Server bind address
    KV_SESSION_PORT       - Server port (0 = ephemeral)
    KV_SESSION_DEBUG      - Enable debug mode (true/false)
    KV_SESSION_LOG_LEVEL  - Log level when not in debug mode
"""

import argparse
import asyncio
import logging
import signal
import sys

from .cache.store import KVStore
from .config.settings import settings
from .network.tcp_server import KVServer


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="KV-Session: Shared In-Memory Key-Value Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on (0 picks a free port)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def main(argv=None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    store = KVStore()
    server = KVServer(host=args.host, port=args.port, store=store)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    logger.info("Starting KV-Session server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port or 'ephemeral'}")
    logger.info(f"  Debug: {args.debug}")

    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
