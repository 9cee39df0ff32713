"""Session-scoped cache of sketch analyses.

Each client session holds the descriptor of its latest upload and the
weights it submitted. A new upload replaces the previous entry.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from ..models.types import Descriptor, WeightConfiguration

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    analysis: Descriptor
    weights: Optional[WeightConfiguration] = None


class SessionStore:
    """In-memory session cache guarded by a lock."""

    def __init__(self):
        self._entries: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def save(self, session_id: Optional[str], entry: SessionEntry) -> str:
        """Store an entry, creating a session id when none is given."""
        session_id = session_id or uuid.uuid4().hex
        with self._lock:
            replaced = session_id in self._entries
            self._entries[session_id] = entry
        logger.debug(f"Session {session_id}: analysis {'replaced' if replaced else 'stored'}")
        return session_id

    def get(self, session_id: Optional[str]) -> Optional[SessionEntry]:
        if not session_id:
            return None
        with self._lock:
            return self._entries.get(session_id)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


# Create global session store
sessions = SessionStore()
