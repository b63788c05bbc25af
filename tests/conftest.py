"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import struct
import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable, Optional

from kvsession.cache.store import KVStore
from kvsession.network.registry import SessionRegistry
from kvsession.network.tcp_server import KVServer
from kvsession.protocol.parser import ProtocolParser

HEADER = struct.Struct(">H")


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll predicate until it holds or the timeout runs out."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() >= deadline:
            return False
        await asyncio.sleep(0.01)
    return True


# ============================================================================
# Store / Protocol / Registry Fixtures
# ============================================================================

@pytest.fixture
def store() -> KVStore:
    """Create a fresh KVStore instance."""
    return KVStore()


@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def registry() -> SessionRegistry:
    """Create an empty SessionRegistry."""
    return SessionRegistry()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def server() -> AsyncGenerator[KVServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a KVServer on an ephemeral port
    2. Starts it in a background task and waits until it is bound
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = KVServer(host='127.0.0.1', port=0)

    server_task = asyncio.create_task(srv.start())
    await asyncio.wait_for(srv.wait_started(), timeout=5)

    yield srv

    # Cleanup
    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


@pytest.fixture
def server_port(server: KVServer) -> int:
    """Port the test server actually bound."""
    return server.port


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Speaks the length-prefixed protocol: every command and every reply
    is one frame.

    Usage:
        async with AsyncClient('127.0.0.1', port) as client:
            response = await client.send_command("PUT key value")
            assert response == "Value stored successfully"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def send_frame(self, payload: bytes) -> None:
        """Send raw bytes as one frame."""
        self.writer.write(HEADER.pack(len(payload)) + payload)
        await self.writer.drain()

    async def recv(self, timeout: float = 2.0) -> str:
        """Receive one reply frame."""
        header = await asyncio.wait_for(self.reader.readexactly(HEADER.size), timeout)
        (length,) = HEADER.unpack(header)
        payload = await asyncio.wait_for(self.reader.readexactly(length), timeout)
        return payload.decode('utf-8')

    async def send_command(self, command: str) -> str:
        """
        Send a command and receive the response.

        Args:
            command: Command string

        Returns:
            Reply text of the first frame
        """
        await self.send_frame(command.encode('utf-8'))
        return await self.recv()

    async def is_closed_by_server(self, timeout: float = 2.0) -> bool:
        """True if the server closes the stream without sending anything."""
        data = await asyncio.wait_for(self.reader.read(), timeout)
        return data == b''

    async def session_id(self, server: KVServer) -> Optional[str]:
        """Look up this connection's session id on the server."""
        sockname = self.writer.get_extra_info('sockname')

        def find():
            for session in server.registry.snapshot():
                if tuple(session.peername[:2]) == tuple(sockname[:2]):
                    return session
            return None

        await wait_until(lambda: find() is not None)
        session = find()
        return session.session_id if session else None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("GET key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
