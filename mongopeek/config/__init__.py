from .settings import EditorSettings, Settings, load_settings, save_settings

__all__ = ["EditorSettings", "Settings", "load_settings", "save_settings"]
