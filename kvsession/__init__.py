"""
KV-Session: Shared In-Memory Key-Value Server

A multi-client key-value server built with Python asyncio. Clients talk
a length-prefixed text protocol over raw TCP sockets, and any client can
force every other session off the server with SELECTED.
"""

__version__ = "1.0.0"
