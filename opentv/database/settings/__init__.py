"""Database operations for application settings.

Settings are a flat key/value map merged on update.
"""

from .read import get_player_settings, get_settings
from .types import MPV_PARAMS, RECORDING_PATH, USE_STREAM_CACHING, VOLUME, PlayerSettings
from .update import update_settings, upsert_settings

__all__ = [
    # Keys
    "MPV_PARAMS",
    "RECORDING_PATH",
    "USE_STREAM_CACHING",
    "VOLUME",
    # Types
    "PlayerSettings",
    # Read operations
    "get_player_settings",
    "get_settings",
    # Update operations
    "update_settings",
    "upsert_settings",
]
