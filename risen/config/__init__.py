from .settings import RisenSettings, get_settings, reload_settings

__all__ = ["RisenSettings", "get_settings", "reload_settings"]
