"""
Session Registry Module

Tracks the live client sessions of a server and implements the forced
disconnect behind the SELECTED command.
"""

import logging
import threading
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from .session import ClientSession

logger = logging.getLogger(__name__)

NO_CONNECTED_CLIENTS = "No connected clients."


class SessionRegistry:
    """
    Thread-safe registry of live client sessions, keyed by session id.

    Sessions add themselves on accept and remove themselves when their
    command loop ends, whichever way it ends. Anything that needs to walk
    the live set works on a snapshot taken under the lock, so sessions
    coming and going mid-walk are never skipped or visited twice.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._sessions: Dict[str, "ClientSession"] = {}
        self._lock = threading.Lock()

    def register(self, session: "ClientSession") -> None:
        """Add a session. Must have a session_id attribute."""
        with self._lock:
            self._sessions[session.session_id] = session

    def deregister(self, session: "ClientSession") -> bool:
        """
        Remove a session.

        Returns:
            True if the session was registered, False otherwise
        """
        with self._lock:
            return self._sessions.pop(session.session_id, None) is not None

    def get(self, session_id: str) -> Optional["ClientSession"]:
        """Get session by id."""
        with self._lock:
            return self._sessions.get(session_id)

    def snapshot(self) -> List["ClientSession"]:
        """Get a list of the sessions live right now."""
        with self._lock:
            return list(self._sessions.values())

    def disconnect_all_except(
            self,
            selected_id: str,
            initiator: Optional["ClientSession"] = None,
    ) -> str:
        """
        Force-close every session whose id differs from selected_id.

        Closing only shuts the connection; each affected session notices
        the closed stream and deregisters itself. The initiator is never
        closed here, even when it is not the selected session, so it can
        finish replying first. It is up to the initiator to end itself
        afterwards.

        Args:
            selected_id: Id of the session to keep
            initiator: Session running the SELECTED command, if any

        Returns:
            Report listing the id of every session seen, one per line
        """
        connected_clients = ""
        for session in self.snapshot():
            connected_clients += f"{session.session_id}\n"
            if session.session_id == selected_id or session is initiator:
                continue
            logger.info(f"Disconnecting session {session.session_id}")
            session.close()

        if not connected_clients:
            return NO_CONNECTED_CLIENTS
        return "Connected clients:\n" + connected_clients

    def __len__(self) -> int:
        """Return number of sessions in registry."""
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        """Check if a session id is registered."""
        with self._lock:
            return session_id in self._sessions
