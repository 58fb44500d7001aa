# checkout_recs/domain/repositories/cart_lines_repo.py

from __future__ import annotations
import logging
from typing import Callable, List, Sequence, Tuple
from checkout_recs.domain.models.product import CartLine
from checkout_recs.domain.ports import CartProvider

logger = logging.getLogger(__name__)

CartListener = Callable[[Sequence[CartLine]], None]

class CartLineFeed(CartProvider):
    """
    In-memory cart provider fed by the host.
    The host pushes the full, ordered line list on every cart change;
    subscribers are notified only when the list actually changed.
    """

    def __init__(self, lines: Sequence[CartLine] = ()):
        self._lines: Tuple[CartLine, ...] = tuple(lines)
        self._listeners: List[CartListener] = []

    def lines(self) -> Tuple[CartLine, ...]:
        return self._lines

    def subscribe(self, callback: CartListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def replace(self, lines: Sequence[CartLine]) -> bool:
        """Replace the cart contents; returns True when listeners were notified."""
        new_lines = tuple(lines)
        if new_lines == self._lines:
            return False
        self._lines = new_lines
        logger.debug("Cart changed: %s lines", len(new_lines))
        for callback in list(self._listeners):
            callback(new_lines)
        return True
