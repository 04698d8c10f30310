"""Tests for the game account and category query set."""

from __future__ import annotations

import pytest

from storefront_query.services.resources import (
    AccountKeys,
    AccountListParams,
    AccountQueries,
    CategoryKeys,
    is_valid_price_range,
)
from storefront_query.shared.errors import DomainError


@pytest.fixture
def accounts(api_client, cache) -> AccountQueries:
    return AccountQueries(api_client, cache)


class TestAccountList:
    @pytest.mark.asyncio
    async def test_filters_use_service_names(self, accounts, api_client):
        params = AccountListParams(
            page=2,
            limit=20,
            category="genshin-impact",
            min_price=100_000,
            max_price=500_000,
            sort="price_asc",
        )

        await accounts.get_list(params).fetch()

        api_client.get.assert_awaited_once_with(
            "/accounts",
            {
                "page": 2,
                "limit": 20,
                "category": "genshin-impact",
                "minPrice": 100_000,
                "maxPrice": 500_000,
                "sort": "price_asc",
            },
        )

    @pytest.mark.asyncio
    async def test_mapping_accepts_wire_names(self, accounts, api_client):
        await accounts.get_list({"minPrice": 0, "maxPrice": 200_000}).fetch()
        await accounts.get_list(AccountListParams(min_price=0, max_price=200_000)).fetch()

        assert api_client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_list_is_fresh_for_three_minutes(self, accounts, api_client, clock):
        await accounts.get_list().fetch()
        clock.advance(179)
        await accounts.get_list().fetch()
        clock.advance(1)
        await accounts.get_list().fetch()

        assert api_client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_inverted_price_filter_is_rejected(self, accounts):
        with pytest.raises(DomainError):
            accounts.get_list({"min_price": 500_000, "max_price": 100_000})

    @pytest.mark.asyncio
    async def test_unknown_filter_is_rejected(self, accounts):
        with pytest.raises(DomainError):
            accounts.get_list({"color": "red"})


class TestFeaturedAndDetail:
    @pytest.mark.asyncio
    async def test_featured_default_limit(self, accounts, api_client):
        observer = accounts.get_featured()

        await observer.fetch()

        assert observer.key == AccountKeys.featured(8)
        assert observer.stale_time == 15 * 60
        api_client.get.assert_awaited_once_with("/accounts/featured", {"limit": 8})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("account_id", ["", None])
    async def test_empty_id_is_disabled(self, accounts, api_client, account_id):
        assert await accounts.get_by_id(account_id).fetch() is None
        api_client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_detail_path_is_quoted(self, accounts, api_client):
        await accounts.get_by_id("abc/def").fetch()

        api_client.get.assert_awaited_once_with("/accounts/abc%2Fdef", None)


class TestCategories:
    @pytest.mark.asyncio
    async def test_categories_windows(self, accounts, api_client):
        observer = accounts.get_categories()

        await observer.fetch()

        assert observer.key == CategoryKeys.ALL
        assert observer.stale_time == 60 * 60
        assert observer.gc_time == 2 * 60 * 60
        api_client.get.assert_awaited_once_with("/categories", None)

    @pytest.mark.asyncio
    async def test_categories_retained_for_two_hours(self, accounts, cache, clock):
        await accounts.get_categories().fetch()

        clock.advance(60 * 60 + 1)
        assert cache.purge_inactive() == 0
        clock.advance(60 * 60)
        assert cache.purge_inactive() == 1


class TestPriceRange:
    @pytest.mark.parametrize(
        ("min_price", "max_price", "valid"),
        [
            (0, 100_000, True),
            (100_000, 1_000_000_000, True),
            (-1, 100_000, False),
            (100_000, 100_000, False),
            (200_000, 100_000, False),
            (0, 1_000_000_001, False),
        ],
    )
    def test_price_range_bounds(self, min_price, max_price, valid):
        assert is_valid_price_range(min_price, max_price) is valid

    @pytest.mark.asyncio
    async def test_valid_range_fetches(self, accounts, api_client):
        observer = accounts.get_by_price_range(100_000, 500_000)

        await observer.fetch()

        assert observer.key == AccountKeys.price_range(100_000, 500_000, 12)
        api_client.get.assert_awaited_once_with(
            "/accounts/price-range",
            {"minPrice": 100_000, "maxPrice": 500_000, "limit": 12},
        )

    @pytest.mark.asyncio
    async def test_invalid_range_is_disabled(self, accounts, api_client):
        observer = accounts.get_by_price_range(500_000, 100_000)

        assert observer.enabled is False
        assert await observer.fetch() is None
        api_client.get.assert_not_awaited()
