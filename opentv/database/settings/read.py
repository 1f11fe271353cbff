"""Settings read operations."""

import logging
from sqlite3 import Connection

from .types import MPV_PARAMS, RECORDING_PATH, USE_STREAM_CACHING, VOLUME, PlayerSettings

logger = logging.getLogger(__name__)


def get_settings(conn: Connection) -> dict[str, str]:
    """Get every stored setting."""
    cursor = conn.execute("SELECT key, value FROM settings")
    return {row["key"]: row["value"] for row in cursor.fetchall() if row["value"] is not None}


def _parse_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    return None


def _parse_int(key: str, value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("[SETTINGS] Ignoring non-numeric %s: %r", key, value)
        return None


def get_player_settings(conn: Connection) -> PlayerSettings:
    """Get the settings used to launch the player.

    Missing or unparsable values come back as None.
    """
    settings = get_settings(conn)
    return PlayerSettings(
        use_stream_caching=_parse_bool(settings.get(USE_STREAM_CACHING)),
        recording_path=settings.get(RECORDING_PATH) or None,
        volume=_parse_int(VOLUME, settings.get(VOLUME)),
        mpv_params=settings.get(MPV_PARAMS) or None,
    )
