#!/usr/bin/env python3
"""
Interactive Test Client for KV-Session

A simple command-line client for manually testing the KV-Session server.
The server picks an ephemeral port by default and prints it on startup;
pass that port with --port.

Usage:
    python scripts/client.py --port 50123                  # localhost
    python scripts/client.py --host 1.2.3.4 --port 50123   # remote host

Commands:
    PUT <key> <value>   - Store a key-value pair
    GET <key>           - Retrieve a value
    DELETE <key>        - Delete a key (DELETE * deletes everything)
    KEYS                - List all keys
    SELECTED <id>       - Disconnect every client except <id>
    QUIT                - Close connection
    help                - Show this help
    exit                - Exit client
"""

import argparse
import socket
import struct
import sys

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

HEADER = struct.Struct(">H")


class KVSessionClient:
    """Simple blocking TCP client speaking the length-prefixed protocol."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.socket = None

    def connect(self) -> bool:
        """Connect to the server."""
        try:
            self.socket = socket.create_connection((self.host, self.port), self.timeout)
            return True
        except OSError as e:
            print(f"Connection error: {e}")
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None

    def _recv_exactly(self, size: int) -> bytes:
        data = b''
        while len(data) < size:
            chunk = self.socket.recv(size - len(data))
            if not chunk:
                raise ConnectionError("Connection closed by server")
            data += chunk
        return data

    def recv_frame(self) -> str:
        """Receive one frame."""
        (length,) = HEADER.unpack(self._recv_exactly(HEADER.size))
        return self._recv_exactly(length).decode('utf-8')

    def send_command(self, command: str) -> str:
        """Send a command and receive the reply (both frames for SELECTED)."""
        if not self.socket:
            return "ERROR: Not connected"

        try:
            payload = command.encode('utf-8')
            self.socket.sendall(HEADER.pack(len(payload)) + payload)

            response = self.recv_frame()
            if command.split()[:1] == ["SELECTED"] and response.startswith("Selected"):
                response += "\n" + self.recv_frame()
            return response

        except socket.timeout:
            return "ERROR: Request timed out"
        except (ConnectionError, OSError) as e:
            return f"ERROR: {e}"

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def print_help():
    """Print help message."""
    print("""
KV-Session Commands (case-sensitive):
-------------------------------------
  PUT <key> <value>   Store a key-value pair (key max 10 characters)
  GET <key>           Retrieve the value for a key
  DELETE <key>        Delete a key-value pair
  DELETE *            Delete every key-value pair
  KEYS                List all keys
  SELECTED <id>       Disconnect every client except session <id>
  QUIT                Close connection and exit

Client Commands:
----------------
  help                Show this help message
  exit                Exit the client
  reconnect           Reconnect to the server
  status              Show connection status

Examples:
---------
  PUT mykey myvalue   Store "myvalue" under "mykey"
  GET mykey           Get value for "mykey"
  DELETE mykey        Delete "mykey"
""")


def main():
    parser = argparse.ArgumentParser(
        description="Interactive test client for KV-Session"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        required=True,
        help="Server port, as printed by the server on startup"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print("KV-Session Client")
    print("=================")
    print(f"Connecting to {args.host}:{args.port}...")

    client = KVSessionClient(args.host, args.port, args.timeout)

    if not client.connect():
        print("Failed to connect. Is the server running?")
        print("  Try: python -m kvsession.server")
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                if command == "help":
                    print_help()
                    continue

                if command == "exit":
                    client.send_command("QUIT")
                    print("Goodbye!")
                    break

                if command == "reconnect":
                    client.disconnect()
                    if client.connect():
                        print("Reconnected!")
                    else:
                        print("Reconnection failed.")
                    continue

                if command == "status":
                    status = "Connected" if client.socket else "Disconnected"
                    print(f"Status: {status}")
                    print(f"Server: {args.host}:{args.port}")
                    continue

                response = client.send_command(command)
                print(response)

                if command == "QUIT" or response.startswith("ERROR: Connection closed"):
                    print("Goodbye!")
                    break

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()
