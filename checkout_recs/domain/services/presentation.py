"""
Presentation adapter: maps panel state + offers onto a render tree of host UI primitives.

The tree mirrors the checkout UI components the host renders (BlockStack,
InlineLayout, Image, Text, Button, Banner, Skeleton*). Nothing here knows how
those primitives are drawn.
"""

from typing import List, Optional, Sequence

from checkout_recs.core.config import PLACEHOLDER_IMAGE_URL
from checkout_recs.domain.models.product import DisplayRecord, ProductRecord, UINode
from checkout_recs.domain.models.state import InteractionState, Phase
from checkout_recs.domain.ports import CurrencyFormatter
from checkout_recs.domain.services.constants import (
    ADD_BUTTON_LABEL,
    ADD_ERROR_MESSAGE,
    PANEL_HEADING,
)

ROW_COLUMNS = [64, "fill", "auto"]


def to_display_record(
    record: ProductRecord,
    formatter: CurrencyFormatter,
    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL,
    adding: bool = False,
) -> DisplayRecord:
    return DisplayRecord(
        product_id=record.id,
        variant_id=record.variant_id,
        title=record.title,
        formatted_price=formatter.format(record.variant_price.amount, record.variant_price.currency_code),
        image_url=record.image_url or placeholder_image_url,
        adding=adding,
    )


def to_display_records(
    offers: Sequence[ProductRecord],
    state: InteractionState,
    formatter: CurrencyFormatter,
    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL,
) -> List[DisplayRecord]:
    return [
        to_display_record(
            o, formatter, placeholder_image_url, adding=state.adding_variant_id == o.variant_id
        )
        for o in offers
    ]


def _node(component: str, text: Optional[str] = None, children=None, **props) -> UINode:
    return UINode(component=component, props=props, children=children or [], text=text)


def _section(rows: List[UINode]) -> List[UINode]:
    return [
        _node(
            "BlockStack",
            spacing="loose",
            children=[
                _node("Divider"),
                _node("Heading", text=PANEL_HEADING, level=2),
                _node("BlockStack", spacing="loose", children=rows),
            ],
        )
    ]


def loading_skeleton() -> List[UINode]:
    """One skeleton row, whatever the final offer count turns out to be."""
    row = _node(
        "InlineLayout",
        spacing="base",
        columns=ROW_COLUMNS,
        blockAlignment="center",
        children=[
            _node("SkeletonImage", aspectRatio=1),
            _node(
                "BlockStack",
                spacing="none",
                children=[
                    _node("SkeletonText", inlineSize="large"),
                    _node("SkeletonText", inlineSize="small"),
                ],
            ),
            _node("Button", text=ADD_BUTTON_LABEL, kind="secondary", disabled=True),
        ],
    )
    return _section([row])


def offer_row(display: DisplayRecord) -> UINode:
    return _node(
        "InlineLayout",
        key=display.product_id,
        spacing="base",
        columns=ROW_COLUMNS,
        blockAlignment="center",
        children=[
            _node(
                "Image",
                border="base",
                borderWidth="base",
                borderRadius="loose",
                source=display.image_url,
                accessibilityDescription=display.title,
                aspectRatio=1,
            ),
            _node(
                "BlockStack",
                spacing="none",
                children=[
                    _node("Text", text=display.title, size="medium", emphasis="bold"),
                    _node("Text", text=display.formatted_price, appearance="subdued"),
                ],
            ),
            _node(
                "Button",
                text=ADD_BUTTON_LABEL,
                kind="secondary",
                loading=display.adding,
                accessibilityLabel=f"Add {display.title} to cart",
                action={"type": "addToCart", "variantId": display.variant_id},
            ),
        ],
    )


def error_banner() -> UINode:
    return _node("Banner", text=ADD_ERROR_MESSAGE, status="critical")


def render_panel(
    state: InteractionState,
    offers: Sequence[ProductRecord],
    formatter: CurrencyFormatter,
    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL,
) -> List[UINode]:
    """
    Render tree for the current panel state.
    - loading: skeleton
    - idle / empty / no offers left after filtering: nothing at all
    - ready: heading, offer rows, then the error banner while it is visible
    """
    if state.phase == Phase.LOADING:
        return loading_skeleton()
    if state.phase != Phase.READY or not offers:
        return []

    rows = [offer_row(d) for d in to_display_records(offers, state, formatter, placeholder_image_url)]
    if state.error_visible:
        rows.append(error_banner())
    return _section(rows)
