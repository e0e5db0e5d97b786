from .base_repository import BaseRepository, to_document

__all__ = ["BaseRepository", "to_document"]
