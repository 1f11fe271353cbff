"""Shared fixtures: a fresh, fully migrated database per test."""

import pytest

from opentv.core.types import MediaType, SourceType
from opentv.database.channels.types import Channel
from opentv.database.connection import open_database
from opentv.database.sources import Source, create_or_find_source


@pytest.fixture
def db_path(tmp_path):
    """Path to a database file that doesn't exist yet."""
    return tmp_path / "data" / "db.sqlite"


@pytest.fixture
def db(db_path):
    """Initialized database with a small pool that never waits."""
    database = open_database(db_path, pool_size=4, timeout=0)
    yield database
    database.close()


@pytest.fixture
def source_id(db):
    """ID of an xtream source named 'provider'."""
    with db.transaction() as conn:
        return create_or_find_source(
            conn,
            Source(name="provider", source_type=SourceType.XTREAM, url="http://example.test"),
        )


def make_channel(name: str, source_id: int, **kwargs) -> Channel:
    """Build a livestream channel with a url derived from its name."""
    kwargs.setdefault("media_type", MediaType.LIVESTREAM)
    kwargs.setdefault("url", f"http://example.test/{name.replace(' ', '_')}")
    return Channel(name=name, source_id=source_id, **kwargs)
