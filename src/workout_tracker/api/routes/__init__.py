"""API route modules."""

from . import active_session, sessions, stats, templates

__all__ = ["active_session", "sessions", "stats", "templates"]
