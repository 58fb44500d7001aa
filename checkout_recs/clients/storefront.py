"""
Shopify Storefront API adapters.

`StorefrontClient` is the query executor used by the fetcher; `StorefrontCartMutator`
applies add-to-cart changes through the `cartLinesAdd` mutation. Both share one
`httpx.AsyncClient` opened in the app lifespan.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from checkout_recs.core.config import Settings
from checkout_recs.domain.errors import FetchError, FetchErrorKind
from checkout_recs.domain.models.state import CartLineChange, MutationResult
from checkout_recs.domain.ports import CartMutator, QueryExecutor
from checkout_recs.domain.services.queries import CART_LINES_ADD_MUTATION

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Shopify-Storefront-Access-Token"


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.storefront_timeout_s,
        headers={"Content-Type": "application/json", "Accept": "application/json"},
    )


class StorefrontClient(QueryExecutor):
    """GraphQL executor for the Storefront API."""

    def __init__(self, client: httpx.AsyncClient, url: str, token: str):
        self.client = client
        self.url = url
        self.token = token

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, settings: Settings) -> "StorefrontClient":
        return cls(client, settings.storefront_url, settings.SHOPIFY_STOREFRONT_TOKEN)

    async def query(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = {"query": document, "variables": variables or {}}
        try:
            response = await self.client.post(self.url, json=payload, headers={TOKEN_HEADER: self.token})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise FetchError(FetchErrorKind.NETWORK, f"storefront request failed: {e}") from e
        except ValueError as e:
            raise FetchError(FetchErrorKind.MALFORMED, f"storefront returned non-JSON body: {e}") from e

        if not isinstance(body, dict):
            raise FetchError(FetchErrorKind.MALFORMED, "storefront response is not an object")

        if errors := body.get("errors"):
            messages = "; ".join(str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors)
            raise FetchError(FetchErrorKind.NETWORK, f"storefront returned errors: {messages}")

        data = body.get("data")
        if not isinstance(data, dict):
            raise FetchError(FetchErrorKind.MALFORMED, "storefront response has no data")
        return data


class StorefrontCartMutator(CartMutator):
    """
    Adds lines to a Storefront cart.
    userErrors and transport failures come back as an `error` outcome; nothing is retried.
    """

    def __init__(self, executor: QueryExecutor, cart_id: str):
        self.executor = executor
        self.cart_id = cart_id

    async def apply(self, change: CartLineChange) -> MutationResult:
        variables = {
            "cartId": self.cart_id,
            "lines": [{"merchandiseId": change.variant_id, "quantity": change.quantity}],
        }
        try:
            data = await self.executor.query(CART_LINES_ADD_MUTATION, variables)
        except FetchError as e:
            logger.warning(f"cartLinesAdd failed for cart_id={self.cart_id}: {e}")
            return MutationResult(outcome="error", message=str(e))

        result = data.get("cartLinesAdd") or {}
        if user_errors := result.get("userErrors"):
            message = "; ".join(str(err.get("message", "")) for err in user_errors if isinstance(err, dict))
            return MutationResult(outcome="error", message=message or "cart change rejected")
        if not result.get("cart"):
            return MutationResult(outcome="error", message="cart change returned no cart")
        return MutationResult(outcome="success")
