from .config import get_settings_module, load_settings

__all__ = ["get_settings_module", "load_settings"]
