# Infrastructure Storage Adapters Package
from .json_store import JsonDeckRepository
from .memory_store import InMemoryStudyRepository

__all__ = ["InMemoryStudyRepository", "JsonDeckRepository"]
