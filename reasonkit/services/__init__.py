"""
Services for reasonkit.

- Session: per-session typed stores, idle clock, graphs, export/import
- SessionManager: per-process session registry
- ServiceContainer: wiring and lifecycle of all services
"""

from reasonkit.services.container import ServiceContainer
from reasonkit.services.session import Session
from reasonkit.services.session_manager import SessionManager

__all__ = [
    "ServiceContainer",
    "Session",
    "SessionManager",
]
