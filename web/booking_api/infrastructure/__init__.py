from .database import engine, SessionFactory, get_session

__all__ = ["engine", "SessionFactory", "get_session"]
