from .settings import Settings, get_settings, DEFAULT_UNIQUE_MESSAGE

__all__ = ["Settings", "get_settings", "DEFAULT_UNIQUE_MESSAGE"]
