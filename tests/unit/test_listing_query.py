"""Unit tests for the feed query builder and ordering."""

from src.mp_listing.domain.models import PostFilters
from src.mp_listing.domain.ordering import TIER_RANK, order_by_clause, tier_rank_case
from src.mp_listing.infrastructure.persistence import build_list_posts_query


class TestBuildListPostsQuery:
    def test_defaults_hide_nsfw(self) -> None:
        sql, params = build_list_posts_query(PostFilters())
        assert "WHERE nsfw = FALSE" in sql
        assert params == {"limit": 100, "offset": 0}

    def test_include_nsfw_drops_filter(self) -> None:
        sql, _ = build_list_posts_query(PostFilters(include_nsfw=True))
        assert "nsfw = FALSE" not in sql
        assert "WHERE" not in sql

    def test_all_sentinels_ignored(self) -> None:
        _, params = build_list_posts_query(PostFilters(category="All", post_type="all"))
        assert "category" not in params
        assert "post_type" not in params

    def test_search_is_bound_not_interpolated(self) -> None:
        sql, params = build_list_posts_query(PostFilters(search="DJ'; DROP TABLE posts;--"))
        assert "DROP TABLE" not in sql
        assert params["search"] == "%dj'; drop table posts;--%"
        assert "title ILIKE :search" in sql

    def test_filters_combined(self) -> None:
        sql, params = build_list_posts_query(
            PostFilters(category="Music", post_type="gig", limit=20, offset=40)
        )
        assert "nsfw = FALSE AND post_type = :post_type AND category = :category" in sql
        assert params["limit"] == 20
        assert params["offset"] == 40

    def test_pay_sort(self) -> None:
        sql, _ = build_list_posts_query(PostFilters(sort_by="Pay"))
        assert "ORDER BY pay DESC" in sql


class TestOrdering:
    def test_chances_ranks_highest(self) -> None:
        assert min(TIER_RANK, key=TIER_RANK.__getitem__) == "Chances"

    def test_default_order_boost_first(self) -> None:
        clause = order_by_clause("Newest")
        assert clause.index("boost_expires_at") < clause.index("verified")
        assert clause.index("verified") < clause.index("CASE WHEN tier")
        assert clause.endswith("created_at DESC, id DESC")

    def test_tier_case(self) -> None:
        assert "WHEN tier = 'Chances' THEN 1" in tier_rank_case()
        assert tier_rank_case().endswith("ELSE 6 END")
