"""
In-memory session storage for the Vacancy Bot.

Note: Data is lost on bot restart; sessions only need to live for the
duration of one application.
"""

import logging
import time
from typing import Awaitable, Callable, Optional

from config import INACTIVITY_TIMEOUT
from models import UserSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Sessions keyed by Telegram user ID, with inactivity expiry."""

    def __init__(self, inactivity_timeout: float = INACTIVITY_TIMEOUT):
        self.inactivity_timeout = inactivity_timeout
        self._sessions: dict[int, UserSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._sessions

    def get(self, user_id: int) -> Optional[UserSession]:
        return self._sessions.get(user_id)

    def set(self, user_id: int, session: UserSession) -> None:
        self._sessions[user_id] = session

    def delete(self, user_id: int) -> None:
        self._sessions.pop(user_id, None)

    def get_or_create(self, user_id: int) -> UserSession:
        """
        Get or create a session for the given user.

        Args:
            user_id: Telegram user ID

        Returns:
            UserSession for this user
        """
        session = self._sessions.get(user_id)
        if session is None:
            session = UserSession(user_id=user_id)
            self._sessions[user_id] = session
        return session

    def touch(self, user_id: int, chat_id: Optional[int]) -> None:
        """
        Record activity on an existing session and remember where to send
        the expiry notice. Users without a session are left alone.
        """
        session = self._sessions.get(user_id)
        if session is None:
            return
        session.last_activity = time.time()
        if chat_id is not None:
            session.chat_id = chat_id

    async def sweep(
        self,
        notify: Callable[[int], Awaitable[object]],
        now: Optional[float] = None
    ) -> int:
        """
        Delete sessions idle for longer than the inactivity timeout.

        Each expired session's chat gets one notice. Sessions touched after
        the sweep started are left alone.

        Args:
            notify: Coroutine function called with the stored chat ID
            now: Sweep start time (defaults to time.time())

        Returns:
            Number of sessions deleted
        """
        cutoff = (time.time() if now is None else now) - self.inactivity_timeout
        candidates = [
            user_id for user_id, session in self._sessions.items()
            if session.last_activity < cutoff
        ]

        expired = 0
        for user_id in candidates:
            session = self._sessions.get(user_id)
            if session is None or session.last_activity >= cutoff:
                continue

            del self._sessions[user_id]
            expired += 1
            logger.info(f"Session of user {user_id} expired after inactivity")

            if session.chat_id is None:
                continue
            try:
                await notify(session.chat_id)
            except Exception as e:
                logger.error(
                    f"Failed to send expiry notice to user {user_id}: {e}"
                )

        return expired
