"""Per-process registry of reasoning sessions."""

from reasonkit.config import Config
from reasonkit.core.scheduling import Scheduler, default_scheduler
from reasonkit.core.unified_store import UnifiedStore
from reasonkit.services.session import Session
from reasonkit.utils.id_generator import generate_session_id
from reasonkit.utils.logger import get_logger

logger = get_logger(__name__)


class SessionManager:
    """
    Creates sessions on first use and forgets them when they end.

    Sessions that time out remove themselves through their cleanup
    callback, so the registry only ever holds live sessions.
    """

    def __init__(
        self,
        config: Config | None = None,
        scheduler: Scheduler | None = None,
        unified_store: UnifiedStore | None = None,
    ):
        self.config = config or Config()
        self._scheduler = scheduler or default_scheduler
        self._unified_store = unified_store
        self._sessions: dict[str, Session] = {}

    def get_or_create(self, session_id: str | None = None) -> Session:
        """Return the live session with this id, creating it if needed."""
        session_id = session_id or generate_session_id()
        session = self._sessions.get(session_id)
        if session is not None:
            session.touch()
            return session

        session = Session(
            session_id,
            config=self.config.session,
            scheduler=self._scheduler,
            graph_config=self.config.graph,
            unified_store=self._unified_store,
            on_cleanup=self._forget,
        )
        self._sessions[session_id] = session
        return session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    def remove(self, session_id: str) -> bool:
        """Clean up and forget a session. Returns False if it is unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.cleanup()
        return True

    def cleanup_all(self) -> None:
        sessions = list(self._sessions.values())
        for session in sessions:
            session.cleanup()
        if sessions:
            logger.info(f"Cleaned up {len(sessions)} sessions")

    def __len__(self) -> int:
        return len(self._sessions)

    def _forget(self, session: Session) -> None:
        if self._sessions.get(session.session_id) is session:
            del self._sessions[session.session_id]
