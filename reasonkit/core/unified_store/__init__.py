"""Cross-kind unified store with optional JSON persistence."""

from reasonkit.core.unified_store.unified_store import UnifiedStore

__all__ = ["UnifiedStore"]
