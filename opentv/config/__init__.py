"""Application configuration.

Single source of truth for all configuration values.
Loads from environment variables with .env file support.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from platformdirs import user_data_dir

# =============================================================================
# VERSION - Read from pyproject.toml (single source of truth)
# =============================================================================


def _get_version() -> str:
    """Read version - prefer pyproject.toml, fall back to installed metadata."""
    try:
        import tomllib
        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
                return data.get("project", {}).get("version", "0.0.0")
    except (OSError, KeyError, ValueError):
        pass

    # Fall back to installed package metadata (pip install without source)
    try:
        from importlib.metadata import PackageNotFoundError, version

        try:
            return version("opentv")
        except PackageNotFoundError:
            pass
    except ImportError:
        pass

    return "0.0.0"


VERSION = _get_version()

# Load .env file from project root
_PROJECT_ROOT = Path(__file__).parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"
load_dotenv(_ENV_FILE)


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


class Config:
    """Application configuration singleton.

    All configuration values should be accessed through this class.
    Values are loaded from environment variables with sensible defaults.
    """

    # Identity used to resolve the per-OS application data directory
    APP_NAME: str = "open-tv"
    APP_AUTHOR: str = "fredol"
    DATABASE_FILENAME: str = "db.sqlite"

    # Explicit database file (overrides the per-OS data directory)
    DATABASE_PATH: str | None = os.getenv("DATABASE_PATH") or None

    # Connection pool
    POOL_SIZE: int = _env_int("POOL_SIZE", 20)
    POOL_TIMEOUT: float = _env_float("POOL_TIMEOUT", 5.0)

    @classmethod
    def get_data_dir(cls) -> Path:
        """Per-OS application data directory (not created here)."""
        return Path(user_data_dir(cls.APP_NAME, cls.APP_AUTHOR))

    @classmethod
    def get_database_path(cls) -> Path:
        """Resolve the database file path.

        Priority:
        1. DATABASE_PATH env var
        2. <per-OS data dir>/db.sqlite
        """
        if cls.DATABASE_PATH:
            return Path(cls.DATABASE_PATH)
        return cls.get_data_dir() / cls.DATABASE_FILENAME

    @classmethod
    def reload(cls) -> None:
        """Reload configuration from environment.

        Useful for testing or runtime config changes.
        """
        load_dotenv(_ENV_FILE, override=True)
        cls.DATABASE_PATH = os.getenv("DATABASE_PATH") or None
        cls.POOL_SIZE = _env_int("POOL_SIZE", 20)
        cls.POOL_TIMEOUT = _env_float("POOL_TIMEOUT", 5.0)


def get_database_path() -> Path:
    """Get the configured database file path."""
    return Config.get_database_path()
