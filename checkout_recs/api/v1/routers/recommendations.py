# checkout_recs/api/v1/routers/recommendations.py
from fastapi import APIRouter, Depends, HTTPException, Response
from typing import Annotated
import time
import logging

from checkout_recs.api.deps import formatter_dep, registry_dep
from checkout_recs.api.v1.schemas.panel import AddToCartIn, AddToCartOut, CartLinesIn, PanelViewOut
from checkout_recs.core.config import get_settings
from checkout_recs.core.versioning import resolve_version
from checkout_recs.domain.errors import AddInProgressError
from checkout_recs.domain.models.state import Phase
from checkout_recs.domain.ports import CurrencyFormatter
from checkout_recs.domain.services.presentation import to_display_records
from checkout_recs.domain.services.registry import PanelRegistry, PanelSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])

VersionDep = Annotated[str, Depends(resolve_version)]
RegistryDep = Annotated[PanelRegistry, Depends(registry_dep)]
FormatterDep = Annotated[CurrencyFormatter, Depends(formatter_dep)]


def _view(session: PanelSession, version: str, formatter: CurrencyFormatter) -> PanelViewOut:
    settings = get_settings()
    panel = session.panel
    state = panel.state
    offers = panel.offers if state.phase == Phase.READY else ()
    return PanelViewOut(
        cart_token=session.cart_token,
        version=version,
        trigger_product_id=panel.trigger_product_id,
        state=state,
        offers=to_display_records(offers, state, formatter, settings.placeholder_image_url),
        tree=panel.render(formatter, settings.placeholder_image_url),
    )


def _session_or_404(registry: PanelRegistry, cart_token: str) -> PanelSession:
    session = registry.get(cart_token)
    if not session:
        raise HTTPException(status_code=404, detail="No recommendation panel for this checkout.")
    return session


@router.put("/checkouts/{cart_token}/lines", response_model=PanelViewOut)
async def update_cart_lines(
    cart_token: str,
    body: CartLinesIn,
    version: VersionDep,
    registry: RegistryDep,
    formatter: FormatterDep,
):
    """
    Cart-change notification from the host checkout.
    Starts a fetch cycle when the first line's product changed and waits for it.
    """
    logger.info(f"Request: update_cart_lines cart_token={cart_token}, lines={len(body.lines)}")
    start_time = time.perf_counter()

    session = registry.get_or_create(cart_token)
    session.feed.replace([line.to_domain() for line in body.lines])
    await session.panel.settled()

    view = _view(session, version, formatter)
    logger.info(
        "Response: update_cart_lines cart_token=%s, phase=%s, offers=%s, elapsed_time=%.4fs",
        cart_token, view.state.phase.value, len(view.offers), time.perf_counter() - start_time,
    )
    return view


@router.get("/checkouts/{cart_token}/recommendations", response_model=PanelViewOut)
async def get_recommendations(
    cart_token: str,
    version: VersionDep,
    registry: RegistryDep,
    formatter: FormatterDep,
):
    """Current panel state, display records and render tree (no fetch is triggered)."""
    session = _session_or_404(registry, cart_token)
    return _view(session, version, formatter)


@router.post("/checkouts/{cart_token}/recommendations/add", response_model=AddToCartOut)
async def add_recommendation_to_cart(
    cart_token: str,
    body: AddToCartIn,
    version: VersionDep,
    registry: RegistryDep,
    formatter: FormatterDep,
):
    """
    Add one unit of an offered variant to the cart.
    409 while another variant is being added; a failed add shows the
    self-expiring error banner in the returned view.
    """
    session = _session_or_404(registry, cart_token)
    offered = {o.variant_id for o in session.panel.offers}
    if body.variant_id not in offered:
        raise HTTPException(status_code=422, detail="Variant is not among the current offers.")

    logger.info(f"Request: add_recommendation_to_cart cart_token={cart_token}, variant_id={body.variant_id}")
    try:
        result = await session.panel.begin_add_to_cart(body.variant_id)
    except AddInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info(
        "Response: add_recommendation_to_cart cart_token=%s, outcome=%s",
        cart_token, result.outcome if result else "ignored",
    )
    return AddToCartOut(result=result, view=_view(session, version, formatter))


@router.delete("/checkouts/{cart_token}", status_code=204)
async def close_panel(cart_token: str, registry: RegistryDep):
    """Tear the panel down (cancels the error banner timer and any in-flight cycle)."""
    if not registry.drop(cart_token):
        raise HTTPException(status_code=404, detail="No recommendation panel for this checkout.")
    return Response(status_code=204)
