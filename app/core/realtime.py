"""Registry of live WebSocket sessions used to push wall notifications."""
import logging
from collections import defaultdict
from typing import Any, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class PushError(Exception):
    """Every live session of a user rejected the push."""
    pass


class LiveSessionHub:
    """
    Tracks open sockets per user id. A user may have several tabs open;
    a push goes to all of them.
    """

    def __init__(self):
        self._sessions: Dict[str, Set[WebSocket]] = defaultdict(set)

    def connect(self, user_id: str, websocket: WebSocket) -> None:
        self._sessions[user_id].add(websocket)
        logger.debug(f"Live session opened for user {user_id} ({len(self._sessions[user_id])} open)")

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sessions = self._sessions.get(user_id)
        if not sessions:
            return
        sessions.discard(websocket)
        if not sessions:
            self._sessions.pop(user_id, None)

    def session_count(self, user_id: str) -> int:
        return len(self._sessions.get(user_id, ()))

    async def push(self, user_id: str, message: Dict[str, Any]) -> int:
        """
        Send `message` to every open session of the user.
        Returns the number of sessions reached; no sessions is not an error.
        """
        sessions = list(self._sessions.get(user_id, ()))
        if not sessions:
            return 0

        delivered = 0
        last_error = None
        for websocket in sessions:
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                last_error = e
                logger.debug(f"Dropping dead live session for user {user_id}: {e}")
                self.disconnect(user_id, websocket)

        if delivered == 0:
            raise PushError(f"Push to user {user_id} failed: {last_error}")
        return delivered
