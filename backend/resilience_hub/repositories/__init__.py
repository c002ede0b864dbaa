from resilience_hub.repositories.base import BaseRepository
from resilience_hub.repositories.sessions import SessionRepository
from resilience_hub.repositories.users import UserRepository

__all__ = ["BaseRepository", "SessionRepository", "UserRepository"]
