"""
Service container.

Builds the per-process services from one Config and owns their
lifecycle, so request handlers receive them by injection instead of
reaching for module-level singletons.
"""

from reasonkit.config import Config
from reasonkit.core.notebook import NotebookStore
from reasonkit.core.scheduling import Scheduler, default_scheduler
from reasonkit.core.unified_store import UnifiedStore
from reasonkit.services.session_manager import SessionManager
from reasonkit.utils.logger import get_logger

logger = get_logger(__name__)


class ServiceContainer:
    """Owns the session manager, notebook store and unified store."""

    def __init__(self, config: Config | None = None, scheduler: Scheduler | None = None):
        self.config = config or Config()
        self.scheduler = scheduler or default_scheduler
        self.unified_store = UnifiedStore(self.config.persistence, scheduler=self.scheduler)
        self.sessions = SessionManager(
            self.config, scheduler=self.scheduler, unified_store=self.unified_store
        )
        self.notebooks = NotebookStore(self.config.notebook)
        self._started = False

    async def start(self) -> None:
        """Start background work. Idempotent."""
        if self._started:
            return
        self.notebooks.start()
        self._started = True
        logger.info("Service container started")

    async def shutdown(self) -> None:
        """Stop background work, end every session and flush persistence."""
        self.notebooks.cleanup()
        self.sessions.cleanup_all()
        self.unified_store.close()
        self._started = False
        logger.info("Service container shut down")
