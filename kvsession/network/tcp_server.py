"""
Async TCP Server Module

This module implements the listener for KV-Session. It accepts
connections forever and runs one ClientSession per connection, all
sharing a single KVStore and SessionRegistry.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..cache.store import KVStore
from ..config.settings import settings
from ..exceptions import BindError
from ..protocol.parser import ProtocolParser
from .registry import SessionRegistry
from .session import ClientSession

logger = logging.getLogger(__name__)


class KVServer:
    """
    Asynchronous TCP server for the KV-Session service.

    Each client connection is handled in its own asyncio task, so a slow
    or idle client never holds up the accept loop or other clients.

    Usage:
        server = KVServer(host='0.0.0.0', port=0)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number; 0 until bound when ephemeral
        store: The KVStore instance shared by all connections
        registry: The SessionRegistry of live sessions
        parser: The ProtocolParser shared by all sessions
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: KVStore = None,
            registry: SessionRegistry = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number, 0 for ephemeral (default from settings)
            store: KVStore instance (creates new one if not provided)
            registry: SessionRegistry instance (creates new one if not provided)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.store = store if store is not None else KVStore()
        self.registry = registry if registry is not None else SessionRegistry()
        self.parser = ProtocolParser()

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._started = asyncio.Event()
        self._connection_count = 0
        self._finished_requests = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Registers a new session before running its command loop, so the
        session is visible to SELECTED from its first command on.
        """
        session = ClientSession(reader, writer, self.store, self.registry, self.parser)
        self.registry.register(session)
        self._connection_count += 1

        try:
            await session.run()
        finally:
            self._finished_requests += session.commands_handled

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Binds, announces the port, then serves until stopped or cancelled.

        Raises:
            BindError: If the listening socket cannot be set up
        """
        if self._running:
            return

        try:
            self._server = await asyncio.start_server(
                self.handle_client,
                self.host,
                self.port,
            )
        except OSError as exc:
            raise BindError(f"Could not bind {self.host}:{self.port}: {exc}") from exc

        self.port = self._server.sockets[0].getsockname()[1]
        self._running = True
        self._started.set()

        print(f"TCP Server started. Port: {self.port}", flush=True)
        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def wait_started(self) -> None:
        """Wait until the server is bound and accepting."""
        await self._started.wait()

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Stops accepting, closes every live session, and waits for the
        listener to shut down.
        """
        if self._server is None:
            return

        self._server.close()
        for session in self.registry.snapshot():
            session.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, and store statistics.
        """
        live = self.registry.snapshot()
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "active_sessions": len(live),
            "total_requests": self._finished_requests + sum(s.commands_handled for s in live),
            "store_stats": self.store.get_stats(),
        }
