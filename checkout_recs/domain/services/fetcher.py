import json
import logging
import time
import warnings
from typing import Any, Dict, List, Optional, Sequence, Tuple

from checkout_recs.domain.errors import FetchError, FetchErrorKind
from checkout_recs.domain.models.product import Money, ProductRecord, RecommendationSet
from checkout_recs.domain.ports import QueryExecutor
from checkout_recs.domain.services.constants import CATALOG_PAGE_SIZE
from checkout_recs.domain.services.queries import (
    CATALOG_PAGE_QUERY,
    PRODUCTS_BY_IDS_QUERY,
    RECOMMENDATION_METAFIELD_QUERY,
)

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "shopify--discovery--product_recommendation"
DEFAULT_KEY = "complementary_products"


def _first_node(connection: Any) -> Optional[Dict[str, Any]]:
    """Return `connection.nodes[0]` or None for missing/empty connections."""
    if not isinstance(connection, dict):
        return None
    nodes = connection.get("nodes") or []
    return nodes[0] if nodes and isinstance(nodes[0], dict) else None


def parse_product_node(node: Any) -> Optional[ProductRecord]:
    """
    Map a Storefront Product node onto a ProductRecord.
    Returns None for null nodes, non-product nodes, products without a variant
    and products whose variant has no usable price.
    """
    if not isinstance(node, dict):
        return None
    if node.get("__typename", "Product") != "Product" or "id" not in node:
        return None

    variant = _first_node(node.get("variants"))
    if not variant or not variant.get("id"):
        logger.debug("Skipping product without variant: %s", node.get("id"))
        return None

    price = variant.get("price")
    try:
        amount = float(price["amount"])
    except (KeyError, TypeError, ValueError):
        logger.warning("Skipping product with missing or invalid price: %s price=%r", node.get("id"), price)
        return None

    image = _first_node(node.get("images"))

    return ProductRecord(
        id=node["id"],
        title=node.get("title") or "",
        image_url=(image or {}).get("url"),
        variant_id=variant["id"],
        variant_price=Money(amount=amount, currency_code=price.get("currencyCode")),
        available_for_sale=bool(variant.get("availableForSale")),
    )


def parse_recommendation_value(value: str) -> RecommendationSet:
    """Deserialize the metafield value: a JSON list of product GIDs."""
    try:
        ids = json.loads(value)
    except (TypeError, ValueError) as e:
        raise FetchError(FetchErrorKind.MALFORMED, f"metafield value is not JSON: {e}") from e
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise FetchError(FetchErrorKind.MALFORMED, "metafield value is not a list of product ids")
    return tuple(ids)


async def fetch_recommendations(
    executor: QueryExecutor,
    trigger_product_id: str,
    *,
    namespace: str = DEFAULT_NAMESPACE,
    key: str = DEFAULT_KEY,
) -> RecommendationSet:
    """
    Resolve the complementary-product ids stored on the trigger product.
    - Missing product, metafield or value → empty set (not an error).
    - Unparseable value → FetchError(MALFORMED).
    """
    t0 = time.perf_counter()
    data = await executor.query(
        RECOMMENDATION_METAFIELD_QUERY,
        {"id": trigger_product_id, "namespace": namespace, "key": key},
    )
    metafield = ((data or {}).get("product") or {}).get("metafield") or {}
    value = metafield.get("value")
    if not value:
        logger.info("No recommendation metafield for product_id=%s", trigger_product_id)
        return ()

    ids = parse_recommendation_value(value)
    logger.info(
        "fetch_recommendations product_id=%s ids=%s time=%.3fs",
        trigger_product_id, len(ids), time.perf_counter() - t0,
    )
    return ids


async def fetch_product_records(
    executor: QueryExecutor,
    ids: Sequence[str],
) -> Tuple[ProductRecord, ...]:
    """
    Resolve full product records for `ids` with ONE batched `nodes(ids:)` lookup.
    Order follows `ids`; deleted (null) and variant-less products are skipped.
    """
    if not ids:
        return ()

    t0 = time.perf_counter()
    data = await executor.query(PRODUCTS_BY_IDS_QUERY, {"ids": list(ids)})
    nodes = (data or {}).get("nodes")
    if not isinstance(nodes, list):
        raise FetchError(FetchErrorKind.MALFORMED, "nodes lookup returned no node list")

    records: List[ProductRecord] = []
    for node in nodes:
        record = parse_product_node(node)
        if record is not None:
            records.append(record)

    logger.info(
        "fetch_product_records requested=%s resolved=%s time=%.3fs",
        len(ids), len(records), time.perf_counter() - t0,
    )
    return tuple(records)


async def fetch_catalog_records(
    executor: QueryExecutor,
    first: int = CATALOG_PAGE_SIZE,
) -> Tuple[ProductRecord, ...]:
    """
    Deprecated recommendation source: read the first catalog page and let the
    availability filter do the rest. Not scoped to the trigger product.
    """
    warnings.warn(
        "the catalog recommendation source is deprecated; use the metafield source",
        DeprecationWarning,
        stacklevel=2,
    )
    data = await executor.query(CATALOG_PAGE_QUERY, {"first": first})
    nodes = ((data or {}).get("products") or {}).get("nodes")
    if not isinstance(nodes, list):
        raise FetchError(FetchErrorKind.MALFORMED, "catalog page returned no node list")
    records = tuple(r for r in (parse_product_node(n) for n in nodes) if r is not None)
    logger.info("fetch_catalog_records first=%s resolved=%s", first, len(records))
    return records
