from .models import AppSettings
from .store import load_settings, save_settings, settings_from_dict, settings_to_dict

__all__ = [
    "AppSettings",
    "load_settings",
    "save_settings",
    "settings_from_dict",
    "settings_to_dict",
]
