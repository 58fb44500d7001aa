# checkout_recs/core/lifespan.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from checkout_recs.clients.storefront import StorefrontCartMutator, StorefrontClient, create_http_client
from checkout_recs.core.config import get_settings
from checkout_recs.domain.services.panel_svc import RecommendationPanel
from checkout_recs.domain.services.registry import PanelRegistry, cart_gid
from checkout_recs.utils.money import MoneyFormatter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    if not settings.storefront_configured:
        logger.warning("⚠️ SHOPIFY_STORE_DOMAIN / SHOPIFY_STOREFRONT_TOKEN not set, fetches will fail")

    http_client = create_http_client(settings)
    executor = StorefrontClient.from_settings(http_client, settings)

    def panel_factory(cart_token: str) -> RecommendationPanel:
        mutator = StorefrontCartMutator(executor, cart_gid(cart_token))
        return RecommendationPanel.from_settings(executor, mutator, settings)

    app.state.http_client = http_client
    app.state.registry = PanelRegistry(panel_factory, idle_ttl_s=settings.panel_idle_ttl_s)
    app.state.formatter = MoneyFormatter()
    logger.info(f"✅ Storefront client ready ({settings.storefront_url})")

    # Application runs
    yield

    # --- Shutdown ---
    app.state.registry.close_all()
    await http_client.aclose()
    logger.info("🔌 Storefront client closed")
