"""Tests for baseline creation and the migration ledger."""

import sqlite3

import pytest

from opentv.database import connection, migrations
from opentv.database.connection import (
    create_baseline,
    drop_db,
    init_db,
    open_database,
    schema_present,
)
from opentv.database.errors import MigrationFailure
from opentv.database.migrations import (
    LATEST_VERSION,
    Migration,
    _get_table_columns,
    _index_columns,
    _table_exists,
    apply_pending_migrations,
    get_current_version,
)
from opentv.database.pool import ConnectionPool

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def pool(tmp_path):
    """Pool over an empty database file."""
    p = ConnectionPool(tmp_path / "schema.sqlite", max_size=2, timeout=0)
    yield p
    p.close()


@pytest.fixture
def legacy_conn(pool):
    """Baseline database written before the migration ledger existed."""
    with pool.connection() as conn:
        create_baseline(conn)
        conn.execute("DROP TABLE schema_migrations")
        conn.execute(
            "INSERT INTO sources (name, source_type, url) VALUES ('playlist', 0, 'http://a')"
        )
        conn.execute(
            "INSERT INTO sources (name, source_type, url) VALUES ('xtream', 2, 'http://b')"
        )
        conn.execute(
            "INSERT INTO channels (name, url, media_type, source_id, favorite) "
            "VALUES ('News', 'http://a/news', 0, 1, 1)"
        )
        yield conn


# =============================================================================
# BASELINE
# =============================================================================


class TestBaseline:
    def test_absent_on_fresh_file(self, pool):
        with pool.connection() as conn:
            assert schema_present(conn) is False

    def test_present_after_create(self, pool):
        with pool.connection() as conn:
            create_baseline(conn)
            assert schema_present(conn) is True
            for table in ("sources", "channels", "groups", "settings"):
                assert _table_exists(conn, table)

    def test_baseline_stamps_version_zero(self, pool):
        with pool.connection() as conn:
            create_baseline(conn)
            assert get_current_version(conn) == 0

    def test_baseline_indexes(self, pool):
        with pool.connection() as conn:
            create_baseline(conn)
            assert _index_columns(conn, "index_source_name") == ["name"]
            assert _index_columns(conn, "index_group_unique") == ["name", "source_id"]
            for column in ("source_id", "favorite", "series_id", "group_id", "media_type"):
                assert _index_columns(conn, f"index_channel_{column}") == [column]

    def test_drop_db_removes_schema(self, db):
        with db.connection() as conn:
            drop_db(conn)
            assert schema_present(conn) is False


# =============================================================================
# MIGRATIONS
# =============================================================================


class TestMigrations:
    def test_fresh_baseline_applies_all_migrations(self, pool):
        with pool.connection() as conn:
            create_baseline(conn)
            assert apply_pending_migrations(conn) == len(migrations.MIGRATIONS)
            assert get_current_version(conn) == LATEST_VERSION
            assert _table_exists(conn, "channel_http_headers")
            assert _table_exists(conn, "epg_notifications")
            assert "use_tvg_id" in _get_table_columns(conn, "sources")

    def test_second_run_is_noop(self, pool):
        with pool.connection() as conn:
            create_baseline(conn)
            apply_pending_migrations(conn)
            assert apply_pending_migrations(conn) == 0

    def test_channel_uniqueness_widened_to_source(self, db):
        with db.connection() as conn:
            assert _index_columns(conn, "channels_unique") == ["name", "url", "source_id"]

    def test_legacy_data_survives(self, legacy_conn):
        apply_pending_migrations(legacy_conn)

        row = legacy_conn.execute("SELECT name, favorite FROM channels").fetchone()
        assert row["name"] == "News"
        assert row["favorite"] == 1

    def test_playlist_sources_use_tvg_id(self, legacy_conn):
        apply_pending_migrations(legacy_conn)

        rows = legacy_conn.execute("SELECT name, use_tvg_id FROM sources ORDER BY id").fetchall()
        assert [(r["name"], r["use_tvg_id"]) for r in rows] == [
            ("playlist", 1),
            ("xtream", None),
        ]

    def test_ledger_adopts_user_version(self, db):
        with db.connection() as conn:
            conn.execute("DROP TABLE schema_migrations")
            assert apply_pending_migrations(conn) == 0
            versions = [
                r["version"]
                for r in conn.execute("SELECT version FROM schema_migrations ORDER BY version")
            ]
            assert versions == [0] + [m.version for m in migrations.MIGRATIONS]

    def test_init_db_is_idempotent(self, db):
        assert init_db(db) == 0
        assert init_db(db) == 0


# =============================================================================
# FAILURE
# =============================================================================


def _broken_migration(conn: sqlite3.Connection) -> None:
    conn.execute("CREATE TABLE half_done (id INTEGER)")
    conn.execute("SELECT * FROM table_that_does_not_exist")


class TestMigrationFailure:
    @pytest.fixture
    def broken(self, monkeypatch):
        broken = Migration(LATEST_VERSION + 1, "broken", _broken_migration)
        monkeypatch.setattr(migrations, "MIGRATIONS", [*migrations.MIGRATIONS, broken])
        return broken

    def test_failure_raises_and_rolls_back(self, db, broken):
        with db.connection() as conn:
            with pytest.raises(MigrationFailure) as exc_info:
                apply_pending_migrations(conn)

            assert exc_info.value.version == broken.version
            assert not _table_exists(conn, "half_done")
            assert get_current_version(conn) == LATEST_VERSION
            assert not conn.in_transaction

    def test_startup_surfaces_failure(self, db_path, broken):
        with pytest.raises(MigrationFailure):
            open_database(db_path, pool_size=2, timeout=0)

    def test_broken_baseline_raises_migration_failure(self, pool, tmp_path, monkeypatch):
        broken_sql = tmp_path / "broken.sql"
        broken_sql.write_text(
            "CREATE TABLE IF NOT EXISTS channels (id INTEGER PRIMARY KEY);\n"
            "CREATE TABLE sources (;\n"
        )
        monkeypatch.setattr(connection, "SCHEMA_PATH", broken_sql)

        with pool.connection() as conn:
            with pytest.raises(MigrationFailure) as exc_info:
                create_baseline(conn)

            assert exc_info.value.version == 0
            assert schema_present(conn) is False
            assert not conn.in_transaction
