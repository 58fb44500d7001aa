from fastapi import FastAPI
from checkout_recs.core.config import get_settings
from checkout_recs.core.lifespan import lifespan
from checkout_recs.api.v1.routers.health import router as health_router
from checkout_recs.api.v1.routers.recommendations import router as recommendations_router
from checkout_recs.core.logging import configure_logging

from fastapi.middleware.cors import CORSMiddleware
import logging, os

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS from env (CSV). Checkout UI extensions run in a Shopify-hosted
# sandbox, so the default allows the extensions CDN origin.
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if allowed_origins else [
        "https://extensions.shopifycdn.com",
    ],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],                            # or ["content-type","x-api-version"]
    max_age=86400,
)

# ------- Routes -------
app.include_router(health_router)
app.include_router(recommendations_router)   # checkout panel
