from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]
RecommendationSource = Literal["metafield", "catalog"]

PLACEHOLDER_IMAGE_URL = (
    "https://cdn.shopify.com/s/files/1/0533/2089/files/"
    "placeholder-images-image_medium.png?format=webp&v=1530129081"
)

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "CheckoutRecommendations"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Shopify Storefront API
    SHOPIFY_STORE_DOMAIN: str = ""             # e.g. "my-shop.myshopify.com"
    SHOPIFY_STOREFRONT_TOKEN: str = ""
    SHOPIFY_API_VERSION: str = "2024-10"
    storefront_timeout_s: float = 10.0

    # Recommendation source
    RECOMMENDATION_SOURCE: RecommendationSource = "metafield"
    recommendation_namespace: str = "shopify--discovery--product_recommendation"
    recommendation_key: str = "complementary_products"
    catalog_page_size: int = 10                # catalog source only

    # Panel
    max_offers: int = 3
    error_banner_timeout_s: float = 3.0
    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL
    panel_idle_ttl_s: float = 1800.0           # idle checkouts are closed after this

    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    @property
    def storefront_url(self) -> str:
        return f"https://{self.SHOPIFY_STORE_DOMAIN}/api/{self.SHOPIFY_API_VERSION}/graphql.json"

    @property
    def storefront_configured(self) -> bool:
        return bool(self.SHOPIFY_STORE_DOMAIN and self.SHOPIFY_STOREFRONT_TOKEN)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
