"""
Chat session management.

Keeps one ChatSession per open chat panel in memory, so the front end can
address its chat by ID for submissions, polling and "new chat" resets.
"""

from typing import Dict, Optional, Any
from datetime import datetime, timedelta
import logging
import threading

from src.models.manager import ModelManager
from src.pipeline.orchestrator.orchestrator import SolveOrchestrator
from src.pipeline.orchestrator.session import ChatSession

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Thread-safe in-memory chat storage. Sessions expire after a period of
    inactivity; nothing is persisted.
    """

    def __init__(self, session_timeout_minutes: int = 60):
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = threading.Lock()
        self.session_timeout = timedelta(minutes=session_timeout_minutes)

    def create_session(self) -> ChatSession:
        session = ChatSession()
        with self._lock:
            self._cleanup_expired_sessions()
            self._sessions[session.chat_id] = session
        return session

    def get_session(self, chat_id: str) -> Optional[ChatSession]:
        with self._lock:
            session = self._sessions.get(chat_id)
            if session is None:
                return None
            now = datetime.utcnow()
            if now - session.last_accessed > self.session_timeout:
                del self._sessions[chat_id]
                return None
            session.last_accessed = now
            return session

    def delete_session(self, chat_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(chat_id, None) is not None

    def _cleanup_expired_sessions(self):
        """Remove expired sessions (called with lock held)."""
        now = datetime.utcnow()
        expired_ids = [
            chat_id for chat_id, session in self._sessions.items()
            if now - session.last_accessed > self.session_timeout
        ]

        for chat_id in expired_ids:
            del self._sessions[chat_id]

        if expired_ids:
            logger.info(f"Cleaned up {len(expired_ids)} expired chat sessions")

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            now = datetime.utcnow()
            return {
                "active_sessions": len(self._sessions),
                "timeout_minutes": self.session_timeout.total_seconds() / 60,
                "oldest_session_age": (
                    max((now - s.created_at).total_seconds() for s in self._sessions.values())
                    if self._sessions else 0
                ),
            }

# Global session manager instance
session_manager = SessionManager()

# FastAPI dependency functions
def get_session_manager() -> SessionManager:
    """FastAPI dependency to get the session manager."""
    return session_manager

def get_model_manager() -> ModelManager:
    """FastAPI dependency to get the model manager from app state."""
    from ..main import app_state
    return app_state["model_manager"]

def get_orchestrator() -> SolveOrchestrator:
    """FastAPI dependency to get the pipeline orchestrator from app state."""
    from ..main import app_state
    return app_state["orchestrator"]
