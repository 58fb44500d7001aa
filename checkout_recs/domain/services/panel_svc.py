import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from checkout_recs.core.config import PLACEHOLDER_IMAGE_URL, Settings
from checkout_recs.domain.errors import AddInProgressError, FetchError, FetchErrorKind, MutationError
from checkout_recs.domain.models.product import CartLine, ProductRecord, UINode
from checkout_recs.domain.models.state import CartLineChange, InteractionState, MutationResult, Phase
from checkout_recs.domain.ports import (
    CartMutator,
    CartProvider,
    CurrencyFormatter,
    PresentationCapability,
    QueryExecutor,
)
from checkout_recs.domain.services.constants import (
    ADD_QUANTITY,
    ALL_SOURCES,
    CATALOG_PAGE_SIZE,
    ERROR_BANNER_TIMEOUT_S,
    EVENT_ADD_FAILED,
    EVENT_FETCH_FAILED,
    EVENT_STALE_CYCLE,
    MAX_OFFERS,
    SOURCE_CATALOG,
    SOURCE_METAFIELD,
)
from checkout_recs.domain.services.fetcher import (
    DEFAULT_KEY,
    DEFAULT_NAMESPACE,
    fetch_catalog_records,
    fetch_product_records,
    fetch_recommendations,
)
from checkout_recs.domain.services.filters import filter_offers, trigger_product_id
from checkout_recs.domain.services.presentation import render_panel

logger = logging.getLogger(__name__)

Listener = Callable[["RecommendationPanel"], None]


class RecommendationPanel:
    """
    Interaction state machine behind the "You might also like" panel.

    Phases: idle → loading → {ready, empty}. A fetch cycle starts whenever the
    trigger product (first cart line's product) changes; each cycle carries a
    generation number and its outcome is applied only while that generation is
    current, so a slow response for an old trigger never overwrites newer state.

    From ready, `begin_add_to_cart` moves the single `adding_variant_id` slot
    through adding → succeeded | failed and back to None. Failures show an
    error notice that clears itself after `error_timeout_s`.

    All state lives on the instance; call `close()` (or use `async with`) to
    release the error timer and stop applying in-flight results.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        mutator: CartMutator,
        *,
        max_offers: int = MAX_OFFERS,
        error_timeout_s: float = ERROR_BANNER_TIMEOUT_S,
        source: str = SOURCE_METAFIELD,
        namespace: str = DEFAULT_NAMESPACE,
        key: str = DEFAULT_KEY,
        catalog_page_size: int = CATALOG_PAGE_SIZE,
    ):
        if source not in ALL_SOURCES:
            raise ValueError(f"Unknown recommendation source: {source}")
        self._executor = executor
        self._mutator = mutator
        self.max_offers = max_offers
        self.error_timeout_s = error_timeout_s
        self.source = source
        self.namespace = namespace
        self.key = key
        self.catalog_page_size = catalog_page_size

        self._state = InteractionState()
        self._lines: Tuple[CartLine, ...] = ()
        self._records: Tuple[ProductRecord, ...] = ()
        self._trigger_product_id: Optional[str] = None
        self._generation = 0
        self._cycle_task: Optional[asyncio.Task] = None
        self._error_timer: Optional[asyncio.TimerHandle] = None
        self._listeners: List[Listener] = []
        self._unsubscribe_cart: Optional[Callable[[], None]] = None
        self._closed = False

    @classmethod
    def from_settings(cls, executor: QueryExecutor, mutator: CartMutator, settings: Settings) -> "RecommendationPanel":
        return cls(
            executor,
            mutator,
            max_offers=settings.max_offers,
            error_timeout_s=settings.error_banner_timeout_s,
            source=settings.RECOMMENDATION_SOURCE,
            namespace=settings.recommendation_namespace,
            key=settings.recommendation_key,
            catalog_page_size=settings.catalog_page_size,
        )

    # ----- Read-only views ---------------------------------------------------

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def cart_lines(self) -> Tuple[CartLine, ...]:
        return self._lines

    @property
    def records(self) -> Tuple[ProductRecord, ...]:
        return self._records

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def trigger_product_id(self) -> Optional[str]:
        return self._trigger_product_id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def offers(self) -> Tuple[ProductRecord, ...]:
        # recomputed on every read from the latest lines and records
        return filter_offers(self._records, self._lines, self.max_offers)

    def render(self, formatter: CurrencyFormatter, placeholder_image_url: str = PLACEHOLDER_IMAGE_URL) -> List[UINode]:
        return render_panel(self._state, self.offers, formatter, placeholder_image_url)

    # ----- Listeners & host wiring -------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Panel listener failed")

    def _set_state(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        self._notify()

    def attach(self, provider: CartProvider) -> Optional[asyncio.Task]:
        """Follow the host cart: subscribe to changes and start the initial cycle."""
        if self._unsubscribe_cart:
            self._unsubscribe_cart()
        self._unsubscribe_cart = provider.subscribe(self.update_cart_lines)
        return self.update_cart_lines(provider.lines())

    def connect_presentation(
        self,
        capability: PresentationCapability,
        formatter: CurrencyFormatter,
        placeholder_image_url: str = PLACEHOLDER_IMAGE_URL,
    ) -> Callable[[], None]:
        """Re-render through `capability` on every change; renders once immediately."""
        def _render(panel: "RecommendationPanel") -> None:
            capability.render(panel.render(formatter, placeholder_image_url))

        _render(self)
        return self.subscribe(_render)

    # ----- Fetch cycle -------------------------------------------------------

    def update_cart_lines(self, lines: Sequence[CartLine]) -> Optional[asyncio.Task]:
        """
        Cart-change notification. Starts a new fetch cycle when the trigger
        product changed and returns its task; otherwise returns the current
        cycle task (if any) after re-notifying listeners, since offers depend
        on the lines too.
        """
        if self._closed:
            logger.debug("Ignoring cart update on closed panel")
            return None

        self._lines = tuple(lines)
        trigger = trigger_product_id(self._lines)

        if trigger == self._trigger_product_id:
            self._notify()
            return self._cycle_task

        self._trigger_product_id = trigger
        self._generation += 1
        self._records = ()

        if trigger is None:
            logger.debug("Cart has no trigger product, panel idle")
            self._cycle_task = None
            self._set_state(phase=Phase.IDLE)
            return None

        generation = self._generation
        logger.info("Starting fetch cycle generation=%s trigger=%s source=%s", generation, trigger, self.source)
        self._set_state(phase=Phase.LOADING)
        self._cycle_task = asyncio.get_running_loop().create_task(self._run_cycle(generation, trigger))
        return self._cycle_task

    async def refresh(self, lines: Sequence[CartLine]) -> InteractionState:
        """Apply a cart update and wait for the fetch cycle it triggers (if any)."""
        self.update_cart_lines(lines)
        return await self.settled()

    async def settled(self) -> InteractionState:
        """
        Wait for the current fetch cycle (if one is in flight) and return the state.
        A cycle cancelled by `close()` is not an error for the waiter.
        """
        task = self._cycle_task
        if task is not None and not task.done():
            # asyncio.wait neither raises the task's cancellation nor cancels the task
            await asyncio.wait({task})
        return self._state

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _discard_stale(self, generation: int, trigger: str) -> None:
        logger.info(
            "Discarding stale fetch cycle",
            extra={"event": EVENT_STALE_CYCLE, "generation": generation, "trigger_product_id": trigger},
        )

    async def _load_records(self, generation: int, trigger: str) -> Optional[Tuple[ProductRecord, ...]]:
        if self.source == SOURCE_CATALOG:
            return await fetch_catalog_records(self._executor, self.catalog_page_size)

        ids = await fetch_recommendations(self._executor, trigger, namespace=self.namespace, key=self.key)
        if not ids:
            return ()
        if not self._is_current(generation):
            # no point resolving records nobody will see
            return None
        return await fetch_product_records(self._executor, ids)

    async def _run_cycle(self, generation: int, trigger: str) -> None:
        try:
            records = await self._load_records(generation, trigger)
        except Exception as e:
            if not self._is_current(generation):
                self._discard_stale(generation, trigger)
                return
            kind = e.kind if isinstance(e, FetchError) else FetchErrorKind.NETWORK
            # shopper sees nothing; operators get the diagnostic event
            logger.error(
                f"Recommendation fetch failed: {e}",
                extra={
                    "event": EVENT_FETCH_FAILED,
                    "error_kind": kind.value,
                    "trigger_product_id": trigger,
                    "generation": generation,
                },
            )
            self._records = ()
            self._set_state(phase=Phase.EMPTY)
            return

        if records is None or not self._is_current(generation):
            self._discard_stale(generation, trigger)
            return

        self._records = records
        phase = Phase.READY if records else Phase.EMPTY
        logger.info(
            "Fetch cycle done generation=%s trigger=%s records=%s offers=%s phase=%s",
            generation, trigger, len(records), len(self.offers), phase.value,
        )
        self._set_state(phase=phase)

    # ----- Add to cart -------------------------------------------------------

    async def begin_add_to_cart(self, variant_id: str) -> Optional[MutationResult]:
        """
        Add one unit of `variant_id` to the cart.
        - Another variant already adding → AddInProgressError, nothing changes.
        - Same variant already adding → ignored, returns None.
        - Panel closed or not ready → ignored, returns None (the mutator is not called).
        - Otherwise awaits the mutator; the adding slot is cleared on every exit path.
        Error outcomes show the self-expiring error notice; nothing is rolled back or retried.
        """
        if self._closed or self._state.phase != Phase.READY:
            logger.debug("Ignoring add for variant_id=%s, panel closed or not ready", variant_id)
            return None

        adding = self._state.adding_variant_id
        if adding is not None:
            if adding == variant_id:
                logger.debug("Add already in flight for variant_id=%s, ignoring", variant_id)
                return None
            raise AddInProgressError(variant_id, adding)

        self._set_state(adding_variant_id=variant_id)
        try:
            try:
                result = await self._mutator.apply(CartLineChange(variant_id=variant_id, quantity=ADD_QUANTITY))
            except MutationError as e:
                result = MutationResult(outcome="error", message=str(e))
        finally:
            self._set_state(adding_variant_id=None)

        if result.ok:
            logger.info("Added variant_id=%s to cart", variant_id)
        else:
            logger.error(
                f"Add to cart failed: {result.message}",
                extra={"event": EVENT_ADD_FAILED, "variant_id": variant_id},
            )
            self._show_error()
        return result

    def _show_error(self) -> None:
        if self._closed:
            return
        if self._error_timer is not None:
            # a new failure restarts the visible window
            self._error_timer.cancel()
        self._error_timer = asyncio.get_running_loop().call_later(self.error_timeout_s, self._clear_error)
        self._set_state(error_visible=True)

    def _clear_error(self) -> None:
        self._error_timer = None
        self._set_state(error_visible=False)

    # ----- Teardown ----------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        if self._error_timer is not None:
            self._error_timer.cancel()
            self._error_timer = None
        if self._unsubscribe_cart:
            self._unsubscribe_cart()
            self._unsubscribe_cart = None
        if self._cycle_task is not None and not self._cycle_task.done():
            self._cycle_task.cancel()
        self._listeners.clear()
        logger.debug("Panel closed")

    async def __aenter__(self) -> "RecommendationPanel":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
