"""Database persistence layer."""
from .database import get_session, init_db
from .models import Application, Base, Job, Match, User

__all__ = [
    "Base",
    "User",
    "Job",
    "Application",
    "Match",
    "init_db",
    "get_session",
]
