"""
Protocol Parser Module

This module handles parsing of raw protocol commands and formatting of
responses into wire frames.
"""

import logging

from .commands import Command, CommandType, Response
from .framing import encode_frame
from ..exceptions import FrameError, ProtocolError

logger = logging.getLogger(__name__)

REPLY_TOO_LONG = "Error: Reply is too long"


class ProtocolParser:
    """
    Parser for the KV-Session text protocol.

    Protocol Format:
        Request:  <COMMAND> [ARGS...]   (one frame)
        Response: <TEXT>                (one frame)

    Commands (verbs are case-sensitive):
        GET <key>            -> <value> | Error: The key <key> does not exist
        PUT <key> <value>    -> Value stored successfully
        DELETE <key>         -> Key deleted successfully
        DELETE *             -> All values were deleted
        KEYS                 -> <key>, <key>, ...
        SELECTED <id>        -> Selected client disconnected other clients
                                followed by a second frame with the report
        QUIT                 -> Connection closed

    Constraints:
        - Keys: max 10 characters (checked by the store)
        - Tokens are separated by any whitespace; a leading separator
          leaves an empty verb, which is an unknown command
    """

    # Minimum token count per verb, with the reply sent when it is not met
    USAGE = {
        CommandType.GET: (2, "Invalid GET command. Format: GET <key>"),
        CommandType.PUT: (3, "Invalid PUT command. Format: PUT <key> <value>"),
        CommandType.DELETE: (2, "Invalid DELETE command. Format: DELETE <key>"),
    }

    SELECTED_USAGE = "Invalid SELECTED command. Format: SELECTED <key>"

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Args:
            data: Raw request string taken from one frame

        Returns:
            Command object. Unknown verbs, empty input and input that
            starts with whitespace give a Command with type=UNKNOWN.

        Raises:
            ProtocolError: If a known verb has the wrong number of tokens

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("PUT mykey myvalue")
            >>> cmd.type == CommandType.PUT
            True
            >>> cmd.key, cmd.value
            ('mykey', 'myvalue')
        """
        # Leading whitespace puts an empty token in the verb position
        if not data or data[0].isspace():
            return Command(type=CommandType.UNKNOWN, raw=data)

        parts = data.split()

        try:
            command_type = CommandType(parts[0])
        except ValueError:
            command_type = CommandType.UNKNOWN

        if command_type in self.USAGE:
            min_tokens, usage = self.USAGE[command_type]
            if len(parts) < min_tokens:
                raise ProtocolError(usage)
        elif command_type == CommandType.SELECTED and len(parts) != 2:
            raise ProtocolError(self.SELECTED_USAGE)

        return Command(type=command_type, parts=parts, raw=data)

    def format_response(self, response: Response) -> bytes:
        """
        Format a Response object into a wire frame.

        A reply too large for one frame is replaced with an error reply,
        so the client always gets exactly one frame back.
        """
        try:
            return encode_frame(response.message)
        except FrameError as exc:
            logger.warning(f"Dropping oversized reply: {exc}")
            return encode_frame(REPLY_TOO_LONG)
