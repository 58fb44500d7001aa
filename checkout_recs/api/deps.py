# checkout_recs/api/deps.py
from fastapi import Request
from checkout_recs.domain.ports import CurrencyFormatter
from checkout_recs.domain.services.registry import PanelRegistry

# Dependency for injecting the panel registry created in the lifespan
def registry_dep(request: Request) -> PanelRegistry:
    return request.app.state.registry

# Dependency for injecting the currency formatter used by the presentation adapter
def formatter_dep(request: Request) -> CurrencyFormatter:
    return request.app.state.formatter
