"""
Session Store - Stato in memoria per conversazione
"""

import logging
import threading
from typing import Dict, Optional

from .state import SessionState

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Mappa session_id -> SessionState.

    Nessuna condivisione tra sessioni: il lock protegge solo il dizionario,
    lo stato di una sessione è modificato da un evento alla volta.
    """

    def __init__(self):
        self._sessions: Dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def create(self, session_id: str, user_id: Optional[str] = None) -> SessionState:
        """Crea una nuova sessione, sostituendo quella esistente (re-launch)"""
        with self._lock:
            if session_id in self._sessions:
                logger.info(f"♻️  Session {session_id} relaunched, previous state discarded")
            session = SessionState(session_id=session_id, user_id=user_id)
            self._sessions[session_id] = session
            return session

    def get(self, session_id: str) -> Optional[SessionState]:
        with self._lock:
            return self._sessions.get(session_id)

    def end(self, session_id: str) -> Optional[SessionState]:
        """Distrugge la sessione e la restituisce (None se non esisteva)"""
        with self._lock:
            return self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
