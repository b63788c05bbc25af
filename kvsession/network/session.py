"""
Client Session Module

One ClientSession per accepted connection. The session owns the
connection, reads one framed command at a time, dispatches it to the
shared store or the session registry, and writes the reply back.
"""

import asyncio
import logging
import uuid
from asyncio import StreamReader, StreamWriter

from ..cache.store import KVStore
from ..exceptions import (
    FrameError,
    KeyNotFoundError,
    NotFoundError,
    ProtocolError,
    ValidationError,
)
from ..protocol.commands import Command, CommandType, Response
from ..protocol.framing import read_frame
from ..protocol.parser import ProtocolParser
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class ClientSession:
    """
    Command loop for a single client connection.

    Lifecycle:
        Connected -> (read -> dispatch -> reply)* -> Terminated

    The loop ends on QUIT, when the client closes the stream, when another
    session force-closes this one through SELECTED, or on an I/O error.
    Malformed commands are answered and the loop carries on.

    Attributes:
        session_id: Unique id, also what SELECTED matches against
        peername: Remote address of the client
        commands_handled: Number of commands processed so far
    """

    def __init__(
            self,
            reader: StreamReader,
            writer: StreamWriter,
            store: KVStore,
            registry: SessionRegistry,
            parser: ProtocolParser = None,
    ):
        self.session_id = str(uuid.uuid4())
        self.reader = reader
        self.writer = writer
        self.store = store
        self.registry = registry
        self.parser = parser if parser is not None else ProtocolParser()
        self.peername = writer.get_extra_info('peername')
        self.commands_handled = 0
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Close the connection from outside the session.

        The pending read in run() sees end-of-stream and the loop exits
        through its normal cleanup. Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True
        self.writer.close()

    async def run(self) -> None:
        """
        Process commands until the session terminates.

        Always deregisters the session and closes the connection on the
        way out.
        """
        logger.info(f"Client {self.peername} connected (session {self.session_id})")

        try:
            while not self._closed:
                try:
                    raw = await read_frame(self.reader)
                except FrameError as exc:
                    await self._send(Response.error(str(exc)))
                    continue

                logger.debug(f"Client {self.peername} sent: {raw!r}")
                self.commands_handled += 1

                if not await self.handle_command(raw):
                    break

        except asyncio.IncompleteReadError:
            logger.debug(f"Stream ended for session {self.session_id}")
        except ConnectionError as exc:
            logger.debug(f"Connection lost for session {self.session_id}: {exc}")
        except OSError as exc:
            logger.warning(f"I/O error on session {self.session_id}: {exc}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {self.peername}: {exc}")
        finally:
            self.registry.deregister(self)
            await self._shutdown()
            logger.info(f"Client {self.peername} disconnected (session {self.session_id})")

    async def handle_command(self, raw: str) -> bool:
        """
        Dispatch one raw command and send its reply.

        Returns:
            False once the session should terminate, True otherwise
        """
        try:
            command = self.parser.parse_request(raw)
        except ProtocolError as exc:
            await self._send(Response.error(str(exc)))
            return True

        if command.type == CommandType.QUIT:
            await self._send(Response.closed())
            logger.debug(f"Client requested quit: {self.peername}")
            return False

        if command.type == CommandType.SELECTED:
            return await self._handle_selected(command)

        await self._send(self.execute(command))
        return True

    def execute(self, command: Command) -> Response:
        """
        Run a store command and build its reply.

        Validation and lookup failures become error replies; they never
        end the session.
        """
        try:
            if command.type == CommandType.GET:
                value = self.store.get(command.key)
                if value is None:
                    raise KeyNotFoundError(command.key)
                return Response.value_response(value)

            if command.type == CommandType.PUT:
                self.store.put(command.key, command.value)
                return Response.stored()

            if command.type == CommandType.DELETE:
                if command.key == self.store.wildcard:
                    self.store.delete(command.key)
                    return Response.deleted_all()
                if not self.store.delete(command.key):
                    raise KeyNotFoundError(command.key)
                return Response.deleted()

            if command.type == CommandType.KEYS:
                return Response.keys_response(self.store.list_keys())

        except (ValidationError, NotFoundError) as exc:
            return Response.error(str(exc))

        return Response.invalid_command()

    async def _handle_selected(self, command: Command) -> bool:
        selected_id = command.key
        await self._send(Response.selected())

        report = self.registry.disconnect_all_except(selected_id, initiator=self)
        await self._send(Response.ok(report))

        if selected_id != self.session_id:
            # Not the survivor: leave now that the report is out
            logger.info(f"Session {self.session_id} not selected, closing")
            return False
        return True

    async def _send(self, response: Response) -> None:
        self.writer.write(self.parser.format_response(response))
        await self.writer.drain()

    async def _shutdown(self) -> None:
        self._closed = True
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as exc:
            logger.debug(f"Error while closing session {self.session_id}: {exc}")
