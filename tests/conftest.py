"""
Shared fixtures and in-memory fakes for the checkout recommendation tests.

The fakes stand in for the host capabilities (query executor, cart mutator,
presentation layer) so the panel can be exercised without network access.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from checkout_recs.domain.errors import FetchError, FetchErrorKind
from checkout_recs.domain.models.product import CartLine, Money, ProductRecord
from checkout_recs.domain.models.state import CartLineChange, MutationResult
from checkout_recs.domain.ports import CartMutator, PresentationCapability, QueryExecutor
from checkout_recs.domain.services.panel_svc import RecommendationPanel
from checkout_recs.utils.money import MoneyFormatter


def product_gid(n) -> str:
    return f"gid://shopify/Product/{n}"


def variant_gid(n) -> str:
    return f"gid://shopify/ProductVariant/{n}"


def product_node(
    n,
    *,
    available: bool = True,
    price: str = "10.00",
    currency: str = "USD",
    image: Optional[str] = "https://cdn.example.com/p.png",
    title: Optional[str] = None,
) -> Dict[str, Any]:
    """Storefront `Product` node as returned by the nodes(ids:) lookup."""
    return {
        "__typename": "Product",
        "id": product_gid(n),
        "title": title or f"Product {n}",
        "images": {"nodes": [{"url": image}] if image else []},
        "variants": {
            "nodes": [
                {
                    "id": variant_gid(n),
                    "availableForSale": available,
                    "price": {"amount": price, "currencyCode": currency},
                }
            ]
        },
    }


def record(n, *, available: bool = True, amount: float = 10.0) -> ProductRecord:
    return ProductRecord(
        id=product_gid(n),
        title=f"Product {n}",
        image_url=None,
        variant_id=variant_gid(n),
        variant_price=Money(amount=amount, currency_code="USD"),
        available_for_sale=available,
    )


def cart_line(variant_n, product_n=None) -> CartLine:
    return CartLine(
        merchandise_id=variant_gid(variant_n),
        product_id=product_gid(product_n if product_n is not None else variant_n),
    )


class FakeStorefront(QueryExecutor):
    """
    Answers the three read queries from in-memory tables.
    `gates[product_id]` holds the metafield query for that trigger until set.
    `failures[product_id]` raises instead of answering the metafield query.
    """

    def __init__(self):
        self.metafields: Dict[str, Optional[str]] = {}
        self.nodes: Dict[str, Optional[Dict[str, Any]]] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.failures: Dict[str, Exception] = {}
        self.calls: List[tuple] = []

    async def query(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        variables = variables or {}
        if "getRecommendationMetafield" in document:
            product_id = variables["id"]
            self.calls.append(("metafield", product_id))
            if product_id in self.gates:
                await self.gates[product_id].wait()
            if product_id in self.failures:
                raise self.failures[product_id]
            if product_id not in self.metafields:
                return {"product": None}
            value = self.metafields[product_id]
            return {"product": {"metafield": {"value": value} if value is not None else None}}

        if "getProductsByIds" in document:
            ids = list(variables["ids"])
            self.calls.append(("nodes", tuple(ids)))
            return {"nodes": [self.nodes.get(i) for i in ids]}

        if "getCatalogPage" in document:
            self.calls.append(("catalog", variables["first"]))
            return {"products": {"nodes": [n for n in self.nodes.values() if n][: variables["first"]]}}

        raise FetchError(FetchErrorKind.NETWORK, "unexpected document")

    def calls_of(self, kind: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == kind]


class FakeMutator(CartMutator):
    """Returns queued outcomes (default success); `gate` holds each call until set."""

    def __init__(self):
        self.outcomes: List[Any] = []
        self.changes: List[CartLineChange] = []
        self.gate: Optional[asyncio.Event] = None

    async def apply(self, change: CartLineChange) -> MutationResult:
        self.changes.append(change)
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else MutationResult(outcome="success")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingPresentation(PresentationCapability):
    def __init__(self):
        self.trees = []

    def render(self, tree) -> None:
        self.trees.append(tree)


@pytest.fixture
def storefront() -> FakeStorefront:
    return FakeStorefront()


@pytest.fixture
def mutator() -> FakeMutator:
    return FakeMutator()


@pytest.fixture
def formatter() -> MoneyFormatter:
    return MoneyFormatter()


@pytest.fixture
async def panel(storefront: FakeStorefront, mutator: FakeMutator):
    """Panel with a short error window so timer tests stay fast."""
    p = RecommendationPanel(storefront, mutator, error_timeout_s=0.2)
    yield p
    p.close()
