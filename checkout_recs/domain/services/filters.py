from typing import FrozenSet, Iterable, Sequence, Tuple

from checkout_recs.domain.models.product import CartLine, ProductRecord
from checkout_recs.domain.services.constants import MAX_OFFERS


def cart_variant_ids(cart_lines: Iterable[CartLine]) -> FrozenSet[str]:
    """Variant (merchandise) ids currently in the cart."""
    return frozenset(line.merchandise_id for line in cart_lines)


def trigger_product_id(cart_lines: Sequence[CartLine]):
    """
    Product id driving the recommendations: the first cart line's product.
    Returns None when the cart is empty or the first line has no product.
    """
    if not cart_lines:
        return None
    return cart_lines[0].product_id or None


def filter_offers(
    records: Iterable[ProductRecord],
    cart_lines: Iterable[CartLine],
    limit: int = MAX_OFFERS,
) -> Tuple[ProductRecord, ...]:
    """
    Build the offer list shown in the panel.
    1) drop records whose primary variant is not available for sale
    2) drop records whose primary variant is already in the cart
    3) keep the first `limit` survivors, in upstream order
    Pure: same inputs, same output.
    """
    in_cart = cart_variant_ids(cart_lines)
    offers = []
    for record in records:
        if len(offers) >= limit:
            break
        if not record.available_for_sale:
            continue
        if record.variant_id in in_cart:
            continue
        offers.append(record)
    return tuple(offers)
