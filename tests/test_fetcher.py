"""Tests for the two dependent Storefront lookups."""

import json

import pytest

from checkout_recs.domain.errors import FetchError, FetchErrorKind
from checkout_recs.domain.services.fetcher import (
    fetch_catalog_records,
    fetch_product_records,
    fetch_recommendations,
    parse_product_node,
)
from tests.conftest import product_gid, product_node, variant_gid


@pytest.mark.asyncio
class TestFetchRecommendations:
    async def test_returns_ids_in_metafield_order(self, storefront):
        storefront.metafields[product_gid(1)] = json.dumps([product_gid(3), product_gid(2)])

        ids = await fetch_recommendations(storefront, product_gid(1))

        assert ids == (product_gid(3), product_gid(2))
        assert storefront.calls == [("metafield", product_gid(1))]

    async def test_missing_metafield_is_empty_not_error(self, storefront):
        storefront.metafields[product_gid(1)] = None
        assert await fetch_recommendations(storefront, product_gid(1)) == ()

    async def test_missing_product_is_empty(self, storefront):
        assert await fetch_recommendations(storefront, product_gid(404)) == ()

    async def test_empty_value_is_empty(self, storefront):
        storefront.metafields[product_gid(1)] = ""
        assert await fetch_recommendations(storefront, product_gid(1)) == ()

    async def test_invalid_json_is_malformed(self, storefront):
        storefront.metafields[product_gid(1)] = "[not json"

        with pytest.raises(FetchError) as exc:
            await fetch_recommendations(storefront, product_gid(1))
        assert exc.value.kind == FetchErrorKind.MALFORMED

    @pytest.mark.parametrize("value", ['{"a": 1}', "[1, 2]", '"gid://shopify/Product/1"'])
    async def test_non_list_of_ids_is_malformed(self, storefront, value):
        storefront.metafields[product_gid(1)] = value

        with pytest.raises(FetchError) as exc:
            await fetch_recommendations(storefront, product_gid(1))
        assert exc.value.kind == FetchErrorKind.MALFORMED

    async def test_network_error_propagates(self, storefront):
        storefront.failures[product_gid(1)] = FetchError(FetchErrorKind.NETWORK, "boom")

        with pytest.raises(FetchError) as exc:
            await fetch_recommendations(storefront, product_gid(1))
        assert exc.value.kind == FetchErrorKind.NETWORK


@pytest.mark.asyncio
class TestFetchProductRecords:
    async def test_single_batched_lookup(self, storefront):
        ids = [product_gid(n) for n in range(1, 6)]
        for n in range(1, 6):
            storefront.nodes[product_gid(n)] = product_node(n)

        records = await fetch_product_records(storefront, ids)

        assert [r.id for r in records] == ids
        assert storefront.calls == [("nodes", tuple(ids))]

    async def test_maps_record_fields(self, storefront):
        storefront.nodes[product_gid(7)] = product_node(7, price="24.50", currency="EUR", available=False)

        (rec,) = await fetch_product_records(storefront, [product_gid(7)])

        assert rec.title == "Product 7"
        assert rec.variant_id == variant_gid(7)
        assert rec.variant_price.amount == 24.5
        assert rec.variant_price.currency_code == "EUR"
        assert rec.available_for_sale is False
        assert rec.image_url == "https://cdn.example.com/p.png"

    async def test_skips_deleted_and_variantless_products(self, storefront):
        no_variant = product_node(2)
        no_variant["variants"] = {"nodes": []}
        storefront.nodes[product_gid(2)] = no_variant
        storefront.nodes[product_gid(3)] = product_node(3)

        records = await fetch_product_records(storefront, [product_gid(1), product_gid(2), product_gid(3)])

        assert [r.id for r in records] == [product_gid(3)]

    async def test_bad_price_skips_only_that_product(self, storefront):
        no_price = product_node(2)
        del no_price["variants"]["nodes"][0]["price"]
        storefront.nodes[product_gid(1)] = product_node(1, price="n/a")
        storefront.nodes[product_gid(2)] = no_price
        storefront.nodes[product_gid(3)] = product_node(3, price="4.00")

        records = await fetch_product_records(storefront, [product_gid(n) for n in (1, 2, 3)])

        assert [r.id for r in records] == [product_gid(3)]
        assert records[0].variant_price.amount == 4.0

    async def test_empty_ids_issue_no_request(self, storefront):
        assert await fetch_product_records(storefront, ()) == ()
        assert storefront.calls == []

    async def test_missing_nodes_is_malformed(self):
        class NoNodes:
            async def query(self, document, variables=None):
                return {}

        with pytest.raises(FetchError) as exc:
            await fetch_product_records(NoNodes(), [product_gid(1)])
        assert exc.value.kind == FetchErrorKind.MALFORMED


class TestParseProductNode:
    def test_missing_image_gives_none(self):
        rec = parse_product_node(product_node(1, image=None))
        assert rec.image_url is None

    def test_non_product_node_is_skipped(self):
        assert parse_product_node({"__typename": "Collection", "id": "gid://shopify/Collection/1"}) is None

    def test_unparseable_price_is_skipped(self):
        assert parse_product_node(product_node(1, price="n/a")) is None

    def test_missing_price_is_skipped(self):
        node = product_node(1)
        del node["variants"]["nodes"][0]["price"]
        assert parse_product_node(node) is None

    def test_price_without_amount_is_skipped(self):
        node = product_node(1)
        node["variants"]["nodes"][0]["price"] = {"currencyCode": "USD"}
        assert parse_product_node(node) is None


@pytest.mark.asyncio
async def test_catalog_source_is_deprecated(storefront):
    for n in range(1, 4):
        storefront.nodes[product_gid(n)] = product_node(n)

    with pytest.warns(DeprecationWarning):
        records = await fetch_catalog_records(storefront, first=2)

    assert [r.id for r in records] == [product_gid(1), product_gid(2)]
    assert storefront.calls == [("catalog", 2)]
