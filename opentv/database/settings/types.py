"""Settings keys and the typed player view.

Settings are stored as a flat key/value table; values are strings.
"""

from dataclasses import dataclass

# Recognized keys
USE_STREAM_CACHING = "use_stream_caching"
RECORDING_PATH = "recording_path"
VOLUME = "volume"
MPV_PARAMS = "mpv_params"


@dataclass
class PlayerSettings:
    """Settings read by the playback collaborator."""

    use_stream_caching: bool | None = None
    recording_path: str | None = None
    volume: int | None = None
    # Opaque extra player arguments; split by the player, not here
    mpv_params: str | None = None
