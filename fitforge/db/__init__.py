"""Database package: engine, session, base."""

from fitforge.db.session import async_session_maker, build_engine, build_session_maker, session_scope

__all__ = ["async_session_maker", "build_engine", "build_session_maker", "session_scope"]
