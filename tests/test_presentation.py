"""Tests for the presentation adapter and the default currency formatter."""

import pytest

from checkout_recs.core.config import PLACEHOLDER_IMAGE_URL
from checkout_recs.domain.models.product import Money, ProductRecord
from checkout_recs.domain.models.state import InteractionState, Phase
from checkout_recs.domain.services.presentation import (
    loading_skeleton,
    render_panel,
    to_display_record,
)
from checkout_recs.utils.money import MoneyFormatter
from tests.conftest import product_gid, record, variant_gid


def _components(nodes):
    """Flatten a render tree into component names (depth first)."""
    out = []
    for node in nodes:
        out.append(node.component)
        out.extend(_components(node.children))
    return out


def _buttons(nodes):
    found = []
    for node in nodes:
        if node.component == "Button":
            found.append(node)
        found.extend(_buttons(node.children))
    return found


class TestDisplayRecord:
    def test_maps_title_price_and_image(self, formatter):
        rec = ProductRecord(
            id=product_gid(1),
            title="Lens cap",
            image_url="https://cdn.example.com/cap.png",
            variant_id=variant_gid(1),
            variant_price=Money(amount=12.5, currency_code="USD"),
            available_for_sale=True,
        )

        display = to_display_record(rec, formatter)

        assert display.title == "Lens cap"
        assert display.formatted_price == "$12.50"
        assert display.image_url == "https://cdn.example.com/cap.png"
        assert display.variant_id == variant_gid(1)
        assert display.adding is False

    def test_missing_image_uses_placeholder(self, formatter):
        assert to_display_record(record(1), formatter).image_url == PLACEHOLDER_IMAGE_URL

    def test_custom_placeholder(self, formatter):
        display = to_display_record(record(1), formatter, "https://cdn.example.com/none.png")
        assert display.image_url == "https://cdn.example.com/none.png"

    def test_uses_injected_formatter(self):
        class Euros:
            def format(self, amount, currency_code=None):
                return f"{amount:.2f} €"

        assert to_display_record(record(1, amount=3), Euros()).formatted_price == "3.00 €"


class TestRenderPanel:
    def test_loading_renders_one_skeleton_row(self, formatter):
        tree = render_panel(InteractionState(phase=Phase.LOADING), [record(1), record(2), record(3)], formatter)

        assert tree == loading_skeleton()
        components = _components(tree)
        assert components.count("InlineLayout") == 1
        assert components.count("SkeletonImage") == 1
        assert components.count("SkeletonText") == 2
        (button,) = _buttons(tree)
        assert button.props["disabled"] is True

    @pytest.mark.parametrize("phase", [Phase.IDLE, Phase.EMPTY])
    def test_idle_and_empty_render_nothing(self, formatter, phase):
        assert render_panel(InteractionState(phase=phase), [record(1)], formatter) == []

    def test_ready_without_offers_renders_nothing(self, formatter):
        state = InteractionState(phase=Phase.READY, error_visible=True)
        assert render_panel(state, [], formatter) == []

    def test_ready_renders_heading_and_rows(self, formatter):
        tree = render_panel(InteractionState(phase=Phase.READY), [record(1), record(2)], formatter)

        (section,) = tree
        divider, heading, rows = section.children
        assert divider.component == "Divider"
        assert heading.text == "You might also like"
        assert heading.props["level"] == 2
        assert [r.props["key"] for r in rows.children] == [product_gid(1), product_gid(2)]
        assert "Banner" not in _components(tree)

    def test_add_buttons_carry_variant_and_loading_flag(self, formatter):
        state = InteractionState(phase=Phase.READY, adding_variant_id=variant_gid(2))
        tree = render_panel(state, [record(1), record(2)], formatter)

        buttons = _buttons(tree)
        assert [b.props["action"]["variantId"] for b in buttons] == [variant_gid(1), variant_gid(2)]
        assert [b.props["loading"] for b in buttons] == [False, True]
        assert buttons[0].props["accessibilityLabel"] == "Add Product 1 to cart"

    def test_error_banner_follows_rows(self, formatter):
        state = InteractionState(phase=Phase.READY, error_visible=True)
        tree = render_panel(state, [record(1)], formatter)

        rows = tree[0].children[2].children
        assert rows[-1].component == "Banner"
        assert rows[-1].props["status"] == "critical"
        assert rows[-1].text == "There was an issue adding this product. Please try again."


class TestMoneyFormatter:
    @pytest.mark.parametrize(
        "amount,code,expected",
        [
            (10, "USD", "$10.00"),
            (1234.5, "USD", "$1,234.50"),
            (19.999, "GBP", "£20.00"),
            (1500, "JPY", "¥1,500"),
            (7.5, "CHF", "7.50 CHF"),
            (-4.2, "EUR", "-€4.20"),
        ],
    )
    def test_format(self, amount, code, expected):
        assert MoneyFormatter().format(amount, code) == expected

    def test_default_currency(self):
        assert MoneyFormatter(default_currency="EUR").format(2) == "€2.00"
