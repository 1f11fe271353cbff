"""Tests for the browse/search query compiler and its results."""

import pytest
from conftest import make_channel
from pydantic import ValidationError

from opentv.core.types import Filters, MediaType, ViewType
from opentv.database.channels import insert_channel
from opentv.database.groups import insert_group
from opentv.database.safe_sql import SQLITE_MAX_INTEGER, QueryBuilder
from opentv.database.search import (
    PAGE_SIZE,
    compile_channel_query,
    compile_search,
    search,
    search_groups,
)
from opentv.database.sources import create_or_find_source, custom_source

LIVE = [MediaType.LIVESTREAM]


# =============================================================================
# COMPILER
# =============================================================================


class TestCompiler:
    def test_parameter_order(self):
        filters = Filters(
            page=3,
            query="news",
            media_types=[MediaType.LIVESTREAM, MediaType.MOVIE],
            source_ids=[1, 2, 3],
            group_id=5,
        )
        compiled = compile_channel_query(filters)

        assert compiled.kind == "channels"
        assert compiled.params == ["%news%", 0, 1, 1, 2, 3, 5, PAGE_SIZE, 2 * PAGE_SIZE]
        assert compiled.sql.count("?") == len(compiled.params)

    def test_empty_sets_match_nothing(self):
        compiled = compile_channel_query(Filters(media_types=[], source_ids=[]))
        assert "IN ()" not in compiled.sql
        assert compiled.sql.count("0 = 1") == 2

    def test_no_query_matches_everything(self):
        compiled = compile_channel_query(Filters(media_types=LIVE, source_ids=[1]))
        assert compiled.params[0] == "%"

    def test_series_scope(self):
        filters = Filters(
            media_types=[MediaType.LIVESTREAM],
            source_ids=[1],
            view_type=ViewType.FAVORITES,
            group_id=4,
            series_id=9,
        )
        compiled = compile_channel_query(filters)

        assert "favorite = 1" not in compiled.sql
        assert "group_id" not in compiled.sql
        assert compiled.params == ["%", int(MediaType.MOVIE), 1, 9, PAGE_SIZE, 0]

    @pytest.mark.parametrize(
        ("view_type", "group_id", "series_id", "kind"),
        [
            (ViewType.CATEGORIES, None, None, "groups"),
            (ViewType.CATEGORIES, 3, None, "channels"),
            (ViewType.CATEGORIES, None, 3, "channels"),
            (ViewType.ALL, None, None, "channels"),
            (ViewType.FAVORITES, None, None, "channels"),
        ],
    )
    def test_query_shape(self, view_type, group_id, series_id, kind):
        filters = Filters(
            view_type=view_type, group_id=group_id, series_id=series_id, source_ids=[1]
        )
        assert compile_search(filters).kind == kind

    def test_page_must_be_positive(self):
        with pytest.raises(ValidationError):
            Filters(page=0)

    def test_builder_rejects_placeholder_mismatch(self):
        with pytest.raises(ValueError):
            QueryBuilder("SELECT * FROM channels").where("name = ?")

    def test_flat_browse_excludes_episodes(self):
        compiled = compile_channel_query(Filters(media_types=LIVE, source_ids=[1], group_id=2))
        assert "series_id IS NULL" in compiled.sql
        assert "group_id = ?" in compiled.sql

    def test_offset_clamped_to_sqlite_integer(self):
        compiled = compile_channel_query(
            Filters(page=10**18, media_types=LIVE, source_ids=[1])
        )
        assert compiled.params[-2:] == [PAGE_SIZE, SQLITE_MAX_INTEGER]


# =============================================================================
# RESULTS
# =============================================================================


class TestSearch:
    def test_pagination(self, db, source_id):
        with db.transaction() as conn:
            for i in range(80):
                insert_channel(conn, make_channel(f"Channel {i:02d}", source_id))

        pages = []
        with db.connection() as conn:
            for page in range(1, 5):
                pages.append(
                    search(conn, Filters(page=page, media_types=LIVE, source_ids=[source_id]))
                )

        assert [len(p) for p in pages] == [36, 36, 8, 0]
        ids = [c.id for p in pages for c in p]
        assert len(set(ids)) == 80

    def test_query_and_source_filter(self, db, source_id):
        with db.transaction() as conn:
            other = create_or_find_source(conn, custom_source("mine"))
            insert_channel(conn, make_channel("BBC News", source_id))
            insert_channel(conn, make_channel("Sky News", other))
            insert_channel(conn, make_channel("Cartoons", source_id))

        with db.connection() as conn:
            found = search(
                conn, Filters(query="news", media_types=LIVE, source_ids=[source_id])
            )
        assert [c.name for c in found] == ["BBC News"]

    def test_no_sources_returns_nothing(self, db, source_id):
        with db.transaction() as conn:
            insert_channel(conn, make_channel("BBC", source_id))
        with db.connection() as conn:
            assert search(conn, Filters(media_types=LIVE, source_ids=[])) == []

    def test_media_type_filter(self, db, source_id):
        with db.transaction() as conn:
            insert_channel(conn, make_channel("BBC", source_id))
            insert_channel(conn, make_channel("Heat", source_id, media_type=MediaType.MOVIE))

        with db.connection() as conn:
            movies = search(
                conn, Filters(media_types=[MediaType.MOVIE], source_ids=[source_id])
            )
        assert [c.name for c in movies] == ["Heat"]

    def test_favorites_view(self, db, source_id):
        with db.transaction() as conn:
            insert_channel(conn, make_channel("BBC", source_id, favorite=True))
            insert_channel(conn, make_channel("CNN", source_id))

        with db.connection() as conn:
            found = search(
                conn,
                Filters(
                    view_type=ViewType.FAVORITES, media_types=LIVE, source_ids=[source_id]
                ),
            )
        assert [c.name for c in found] == ["BBC"]
        assert found[0].favorite is True

    def test_rows_without_url_are_hidden(self, db, source_id):
        with db.transaction() as conn:
            insert_channel(conn, make_channel("Broken", source_id, url=None))
        with db.connection() as conn:
            assert search(conn, Filters(media_types=LIVE, source_ids=[source_id])) == []

    def test_group_scope(self, db, source_id):
        with db.transaction() as conn:
            news = insert_group(conn, "News", None, source_id)
            insert_channel(conn, make_channel("BBC", source_id, group_id=news))
            insert_channel(conn, make_channel("Cartoons", source_id))

        with db.connection() as conn:
            found = search(
                conn,
                Filters(
                    view_type=ViewType.CATEGORIES,
                    group_id=news,
                    media_types=LIVE,
                    source_ids=[source_id],
                ),
            )
        assert [c.name for c in found] == ["BBC"]

    def test_series_scope_returns_episodes(self, db, source_id):
        with db.transaction() as conn:
            insert_channel(
                conn, make_channel("Show", source_id, media_type=MediaType.SERIES, url="9")
            )
            insert_channel(
                conn, make_channel("S01E01", source_id, media_type=MediaType.MOVIE, series_id=9)
            )
            insert_channel(
                conn, make_channel("S01E02", source_id, media_type=MediaType.MOVIE, series_id=9)
            )
            insert_channel(conn, make_channel("Movie", source_id, media_type=MediaType.MOVIE))

        with db.connection() as conn:
            found = search(
                conn,
                Filters(
                    series_id=9,
                    view_type=ViewType.FAVORITES,
                    media_types=None,
                    source_ids=[source_id],
                ),
            )
        assert sorted(c.name for c in found) == ["S01E01", "S01E02"]

    def test_categories_return_group_rows(self, db, source_id):
        with db.transaction() as conn:
            other = create_or_find_source(conn, custom_source("mine"))
            insert_group(conn, "News", "news.png", source_id)
            insert_group(conn, "Sports", None, source_id)
            insert_group(conn, "Family", None, other)

        with db.connection() as conn:
            found = search(
                conn, Filters(view_type=ViewType.CATEGORIES, source_ids=[source_id])
            )
            named = search_groups(conn, Filters(query="spo", source_ids=[source_id]))

        assert sorted(c.name for c in found) == ["News", "Sports"]
        assert all(c.media_type is MediaType.GROUP for c in found)
        assert all(c.url is None for c in found)
        assert [c.name for c in named] == ["Sports"]

    def test_query_text_is_bound(self, db, source_id):
        with db.transaction() as conn:
            insert_channel(conn, make_channel("BBC", source_id))

        hostile = "x%' OR 1=1; DROP TABLE channels; --"
        with db.connection() as conn:
            found = search(
                conn, Filters(query=hostile, media_types=LIVE, source_ids=[source_id])
            )
            remaining = conn.execute("SELECT COUNT(*) FROM channels").fetchone()[0]

        assert found == []
        assert remaining == 1

    def test_movie_browse_skips_episodes(self, db, source_id):
        with db.transaction() as conn:
            insert_channel(conn, make_channel("Film", source_id, media_type=MediaType.MOVIE))
            insert_channel(
                conn,
                make_channel(
                    "S01E01", source_id, media_type=MediaType.MOVIE, series_id=7, favorite=True
                ),
            )

        with db.connection() as conn:
            movies = search(
                conn, Filters(media_types=[MediaType.MOVIE], source_ids=[source_id])
            )
            favorites = search(
                conn,
                Filters(
                    view_type=ViewType.FAVORITES,
                    media_types=[MediaType.MOVIE],
                    source_ids=[source_id],
                ),
            )
            episodes = search(conn, Filters(series_id=7, source_ids=[source_id]))

        assert [c.name for c in movies] == ["Film"]
        assert favorites == []
        assert [c.name for c in episodes] == ["S01E01"]

    def test_page_far_past_end_is_empty(self, db, source_id):
        with db.transaction() as conn:
            insert_channel(conn, make_channel("BBC", source_id))

        with db.connection() as conn:
            found = search(
                conn, Filters(page=10**18, media_types=LIVE, source_ids=[source_id])
            )
        assert found == []
