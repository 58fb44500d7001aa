import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from checkout_recs.domain.repositories.cart_lines_repo import CartLineFeed
from checkout_recs.domain.services.panel_svc import RecommendationPanel

logger = logging.getLogger(__name__)

PanelFactory = Callable[[str], RecommendationPanel]


def cart_gid(cart_token: str) -> str:
    return f"gid://shopify/Cart/{cart_token}"


@dataclass
class PanelSession:
    cart_token: str
    panel: RecommendationPanel
    feed: CartLineFeed
    last_used: float = field(default=0.0)


class PanelRegistry:
    """
    One panel (and its cart feed) per checkout, keyed by cart token.
    Owned by the app lifespan; `close_all()` tears every panel down.

    Sessions untouched for `idle_ttl_s` seconds are closed and dropped on the
    next lookup, so abandoned checkouts do not pile up. `None` disables expiry.
    """

    def __init__(
        self,
        factory: PanelFactory,
        *,
        idle_ttl_s: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._sessions: Dict[str, PanelSession] = {}
        self.idle_ttl_s = idle_ttl_s
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def _touch(self, session: PanelSession) -> PanelSession:
        session.last_used = self._clock()
        return session

    def evict_idle(self) -> int:
        """Close and drop sessions idle longer than `idle_ttl_s`; returns how many."""
        if self.idle_ttl_s is None:
            return 0
        deadline = self._clock() - self.idle_ttl_s
        expired = [token for token, s in self._sessions.items() if s.last_used <= deadline]
        for token in expired:
            self.drop(token)
        if expired:
            logger.info("Evicted idle panels count=%s ttl=%ss (open panels=%s)", len(expired), self.idle_ttl_s, len(self._sessions))
        return len(expired)

    def get(self, cart_token: str) -> Optional[PanelSession]:
        self.evict_idle()
        session = self._sessions.get(cart_token)
        return self._touch(session) if session else None

    def get_or_create(self, cart_token: str) -> PanelSession:
        if session := self.get(cart_token):
            return session
        feed = CartLineFeed()
        panel = self._factory(cart_token)
        panel.attach(feed)
        session = self._touch(PanelSession(cart_token=cart_token, panel=panel, feed=feed))
        self._sessions[cart_token] = session
        logger.info("Panel created cart_token=%s (open panels=%s)", cart_token, len(self._sessions))
        return session

    def drop(self, cart_token: str) -> bool:
        session = self._sessions.pop(cart_token, None)
        if not session:
            return False
        session.panel.close()
        logger.info("Panel closed cart_token=%s", cart_token)
        return True

    def close_all(self) -> None:
        for token in list(self._sessions):
            self.drop(token)
