# FILE: certquiz/services/session_registry.py
"""
In-memory registry of live quiz sessions
"""
import logging
from collections import OrderedDict
from typing import Dict

from certquiz.services.errors import SessionNotFound
from certquiz.services.quiz_session import SessionController

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Live sessions keyed by session id; oldest evicted beyond max_sessions"""

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, SessionController]" = OrderedDict()

    def add(self, controller: SessionController) -> str:
        session_id = controller.session.session_id
        self._sessions[session_id] = controller
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted session {evicted} (max_sessions={self.max_sessions})")
        return session_id

    def get(self, session_id: str) -> SessionController:
        controller = self._sessions.get(session_id)
        if controller is None:
            raise SessionNotFound(f"Quiz session '{session_id}' not found")
        return controller

    def drop(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def clear(self):
        self._sessions.clear()

    def stats(self) -> Dict[str, int]:
        return {"active_sessions": len(self._sessions), "max_sessions": self.max_sessions}

    def __len__(self) -> int:
        return len(self._sessions)
