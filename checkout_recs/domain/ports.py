"""Ports: the host capabilities the recommendation panel depends on."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

from checkout_recs.domain.models.product import CartLine, UINode
from checkout_recs.domain.models.state import CartLineChange, MutationResult


class QueryExecutor(ABC):
    """Runs a GraphQL document against the commerce backend."""

    @abstractmethod
    async def query(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Return the `data` object of the response.
        Transport or GraphQL-level failures raise FetchError(NETWORK).
        """
        ...


class CartMutator(ABC):
    """Applies a cart line change on behalf of the shopper."""

    @abstractmethod
    async def apply(self, change: CartLineChange) -> MutationResult:
        ...


class CurrencyFormatter(ABC):
    @abstractmethod
    def format(self, amount: float, currency_code: Optional[str] = None) -> str:
        ...


class CartProvider(ABC):
    """Current cart lines plus change notifications."""

    @abstractmethod
    def lines(self) -> Sequence[CartLine]:
        ...

    @abstractmethod
    def subscribe(self, callback: Callable[[Sequence[CartLine]], None]) -> Callable[[], None]:
        """Register `callback` for cart changes; returns an unsubscribe function."""
        ...


class PresentationCapability(ABC):
    """Host rendering layer; consumes the render tree produced by the presentation adapter."""

    @abstractmethod
    def render(self, tree: List[UINode]) -> None:
        ...
